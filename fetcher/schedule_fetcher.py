"""HTTP client for the weekly schedule endpoint of the school API."""
import base64
import logging
from datetime import date
from typing import Optional

import requests

from processor.date_formatter import to_request_date
from processor.models import Credentials, RequestSpec

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a schedule request fails or returns a non-success status."""
    
    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ScheduleFetcher:
    """Fetcher for one week of the student's schedule."""
    
    USER_AGENT = "InovarAluno/20210804 CFNetwork/1492.0.1 Darwin/23.3.0"
    ACCEPT_LANGUAGE = "en-us"
    ACCEPT_ENCODING = "gzip, deflate"
    
    def __init__(self, credentials: Credentials,
                 timeout: Optional[float] = None):
        """
        Initialize the schedule fetcher.
        
        Args:
            credentials: School API credentials, shared read-only
            timeout: HTTP request timeout in seconds (default: no timeout)
        """
        self.credentials = credentials
        self.timeout = timeout
    
    def build_request(self, reference_date: date) -> RequestSpec:
        """
        Build the request for the week containing the reference date.
        
        Args:
            reference_date: Any date inside the requested week
            
        Returns:
            RequestSpec with URL and headers
        """
        credentials = self.credentials
        token = base64.b64encode(
            f"{credentials.login}:{credentials.password}".encode('utf-8')
        ).decode('ascii')
        
        url = (
            f"{credentials.server_base_url}/{credentials.student_number}/"
            f"{to_request_date(reference_date)}/Regular"
        )
        return RequestSpec(
            url=url,
            headers={
                'User-Agent': self.USER_AGENT,
                'Accept': 'application/json',
                'Accept-Language': self.ACCEPT_LANGUAGE,
                'Authorization': f"Basic {token}",
                'Accept-Encoding': self.ACCEPT_ENCODING,
            }
        )
    
    def fetch(self, spec: RequestSpec) -> str:
        """
        Perform a single GET request, without retries.
        
        Args:
            spec: Request parameters
            
        Returns:
            Response body as text
            
        Raises:
            FetchError: On transport failure or non-2xx status
        """
        try:
            response = requests.get(
                spec.url,
                headers=spec.headers,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            body = e.response.text if e.response is not None else None
            logger.error(f"Schedule request failed with status {status_code}: {spec.url}")
            raise FetchError(
                f"Schedule request returned status {status_code}: {body}",
                status_code=status_code,
                body=body
            ) from e
        except requests.RequestException as e:
            logger.error(f"Schedule request failed: {e}")
            raise FetchError(f"Schedule request failed: {e}") from e
        
        return response.text
    
    def fetch_week(self, reference_date: date) -> str:
        """Fetch the raw schedule JSON for the week of reference_date."""
        logger.info(f"Fetching schedule for week of {to_request_date(reference_date)}")
        return self.fetch(self.build_request(reference_date))
