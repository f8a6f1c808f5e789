import google.auth
from google.auth.exceptions import DefaultCredentialsError
from services.errors import AccessDeniedError

def get_credentials():
    """Get authenticated credentials for Google Cloud Storage"""
    try:
        credentials, _ = google.auth.default(
            scopes=['https://www.googleapis.com/auth/cloud-platform']
        )
        return credentials
    except DefaultCredentialsError as e:
        raise AccessDeniedError(f"Error obtaining credentials: {str(e)}") from e
