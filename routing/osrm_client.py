#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#timeouts and error translation
#parsing response JSON into our internal shape
#It should not contain consolidation rules, scoring or fallbacks.


from dotenv import load_dotenv
import os
from typing import Dict, List, Optional, Tuple
import requests

# Read OSRM base URL and timeout from environment
# Example in .env:
# BASE_URL=http://router.project-osrm.org
# GEO_TIMEOUT_SECONDS=2
load_dotenv()
BASE_URL = os.getenv("BASE_URL")
DEFAULT_TIMEOUT_SECONDS = float(os.getenv("GEO_TIMEOUT_SECONDS", "2"))

# Internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]


class OSRMError(Exception):
    """Raised when OSRM cannot be reached or answers with an unusable payload."""
    pass


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal (lat, lon) -> OSRM (lon,lat)
    - Return normalized outputs (meters, seconds)

    """
    def __init__(self, profile: str = "driving", timeout: float = DEFAULT_TIMEOUT_SECONDS,
                 base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url or BASE_URL
        self.timeout = timeout #the time to wait for a response from OSRM before giving up
        self.profile = profile #the mode of transportation (driving, walking, cycling)
        self.session = session or requests.Session()

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set BASE_URL in the .env file.")

    def format_coordinates(self, coords: List[LatLon]) -> str:
        """Convert list of (lat, lon) to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join([f"{lon},{lat}" for lat, lon in coords])

    def compute_route(self, coordinates: List[LatLon]) -> Dict[str, float]:
        """
        Calls the OSRM /route endpoint with the given coordinates and
        returns a dict with distance and duration.

        Returns:
            {
                "distance": float, # in meters
                "duration": float, # in seconds
            }

        Raises:
            OSRMError on transport failure, timeout, non-"Ok" code or malformed JSON.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(coordinates)}"

        try:
            response = self.session.get(
                url,
                params={
                    "overview": "false", # we don't need the geometry of the route
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise OSRMError(f"OSRM request failed: {exc}") from exc
        except ValueError as exc:
            raise OSRMError(f"OSRM returned invalid JSON: {exc}") from exc

        #validating OSRM response
        if data.get("code") != "Ok":
            raise OSRMError(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")

        try:
            route = data["routes"][0] #take the first route (OSRM may return alternatives)
            return {
                "distance": float(route["distance"]),
                "duration": float(route["duration"]),
            }
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise OSRMError(f"OSRM route payload malformed: {exc}") from exc
