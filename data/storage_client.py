import logging
from google.cloud import storage
from config.credentials import get_credentials

logger = logging.getLogger(__name__)

def initialize_storage_client(project):
    """Initialize and return a Cloud Storage client for the given project."""
    credentials = get_credentials()
    client = storage.Client(credentials=credentials, project=project)
    logger.debug(f"Initialized storage client for project {project}")
    return client
