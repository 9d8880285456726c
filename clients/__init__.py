# External collaborator clients
from clients.booking_api_client import BookingApiClient, BookingApiError
