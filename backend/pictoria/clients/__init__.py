"""HTTP clients for the hosted providers Pictoria depends on."""

from pictoria.clients.email_client import EmailClient
from pictoria.clients.identity_client import IdentityClient, UserProfile
from pictoria.clients.replicate_client import Prediction, ReplicateClient, Training

__all__ = [
    "EmailClient",
    "IdentityClient",
    "UserProfile",
    "ReplicateClient",
    "Training",
    "Prediction",
]
