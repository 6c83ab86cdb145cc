"""Publisher module for posting bot updates to the social network."""
import logging
import uuid
from typing import Optional

import requests

from models import PostResult

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.x.com/2/tweets'

class PublishError(Exception):
    """Base exception for publishing errors"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(f"Publish failed [{status_code}]: {message}" if status_code else message)

class PublisherAuthError(PublishError):
    """Raised when the access token is rejected"""
    pass

class Publisher:
    """Base class for anything that can publish a text post."""

    def publish(self, text: str) -> PostResult:
        raise NotImplementedError

class XPublisher(Publisher):
    """Posts to the X v2 tweets endpoint with a bearer user token."""

    def __init__(
        self,
        access_token: str,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 10
    ):
        if not access_token:
            raise PublisherAuthError("No access token configured")
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {access_token}',
            'content-type': 'application/json',
        })

    def publish(self, text: str) -> PostResult:
        """Publish a post.

        Args:
            text: Post body

        Returns:
            PostResult with the id assigned by the network

        Raises:
            PublisherAuthError: The token was rejected
            PublishError: Any other failure
        """
        try:
            response = self.session.post(self.api_url, json={'text': text}, timeout=self.timeout)

            if response.status_code in (401, 403):
                raise PublisherAuthError(
                    "Authentication failed - check x_access_token",
                    response.status_code
                )

            response.raise_for_status()
            data = response.json()
            post_id = str(data['data']['id'])

        except requests.exceptions.Timeout as e:
            raise PublishError(f"Request timed out after {self.timeout} seconds") from e
        except requests.exceptions.ConnectionError as e:
            raise PublishError(f"Failed to connect to {self.api_url}") from e
        except requests.exceptions.HTTPError as e:
            raise PublishError(str(e), e.response.status_code if e.response is not None else None) from e
        except requests.exceptions.RequestException as e:
            raise PublishError(f"Request failed: {str(e)}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise PublishError(f"Invalid response format: {str(e)}") from e

        logger.info(f"Post published with ID: {post_id}")
        return PostResult(id=post_id, text=text)

class LogPublisher(Publisher):
    """Dry-run publisher: logs the post instead of sending it."""

    def publish(self, text: str) -> PostResult:
        post_id = f"dry-run-{uuid.uuid4().hex[:12]}"
        logger.info(f"[dry run] Would publish post {post_id}:\n{text}")
        return PostResult(id=post_id, text=text)

__all__ = [
    'Publisher',
    'XPublisher',
    'LogPublisher',
    'PublishError',
    'PublisherAuthError',
]
