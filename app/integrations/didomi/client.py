"""Consent management (Didomi) API client."""

from typing import Any, Dict, List, Optional

import requests
from core.errors import AuthenticationFailure, ConfigurationError, NotFound
from core.logging import get_module_logger

logger = get_module_logger()

DEFAULT_TIMEOUT = 60

# Selects the multi-regulation response shape of the notice config endpoints
MULTI_REGULATION_HEADERS = {"v": "2"}


def fetch_api_token(base_url, api_key, api_secret, timeout=DEFAULT_TIMEOUT):
    """Exchange an API key and secret for an access token.

    Parameters:
    base_url: Base URL of the consent API
    api_key: API key identifier
    api_secret: API key secret

    Returns the access token issued by `POST /sessions`.
    """
    if not api_key:
        logger.error("api_token_fetch_failed", error="Missing API key")
        raise ConfigurationError("DIDOMI_API_KEY is missing")
    if not api_secret:
        logger.error("api_token_fetch_failed", error="Missing API secret")
        raise ConfigurationError("DIDOMI_API_SECRET is missing")

    response = requests.post(
        f"{base_url}/sessions",
        json={"type": "api-key", "key": api_key, "secret": api_secret},
        timeout=timeout,
    )
    _raise_for_status(response, "POST /sessions")
    token = response.json().get("access_token")
    if not token:
        logger.error("api_token_fetch_failed", error="No access token in response")
        raise AuthenticationFailure()
    logger.info("api_token_fetched")
    return token


def _raise_for_status(response, operation):
    """Map error statuses to the tool's exceptions.

    401 raises AuthenticationFailure, 404 raises NotFound and any other error
    status raises requests.HTTPError.
    """
    if response.status_code == 401:
        logger.error("consent_api_unauthorized", operation=operation)
        raise AuthenticationFailure()
    if response.status_code == 404:
        logger.error("consent_api_not_found", operation=operation)
        raise NotFound(f"{operation} returned 404")
    if response.status_code >= 400:
        logger.error(
            "consent_api_error",
            operation=operation,
            response_code=response.status_code,
        )
    response.raise_for_status()


class ConsentApiClient:
    """Thin client over the consent API endpoints used by the tools.

    Attributes:
        base_url: Base URL of the API (e.g. "https://api.didomi.io/v1").
        organization_id: Organization owning the notices.
        session: requests.Session carrying the bearer token.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        organization_id: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.organization_id = organization_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        operation = f"{method} {path}"
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            params=params,
            json=json,
            headers=headers,
            timeout=self.timeout,
        )
        _raise_for_status(response, operation)
        if not response.content:
            return None
        return response.json()

    def _organization_params(self, **params) -> Dict[str, Any]:
        if self.organization_id:
            params["organization_id"] = self.organization_id
        return params

    # --- Notices ---

    def get_notice(self, notice_id: str) -> Dict[str, Any]:
        """Get a notice by ID."""
        data = self._request("GET", f"/widgets/notices/{notice_id}")
        if not data or not data.get("id"):
            raise NotFound(f"Notice not found for id: {notice_id}")
        return data

    def get_draft_notice_config(self, notice_id: str) -> Dict[str, Any]:
        """Get the draft (not yet deployed) configuration of a notice.

        Raises:
            NotFound: If the notice has no draft configuration.
        """
        params = self._organization_params(notice_id=notice_id, deployed_at="null")
        data = self._request(
            "GET",
            "/widgets/notices/configs",
            params=params,
            headers=MULTI_REGULATION_HEADERS,
        )
        configs = (data or {}).get("data") or []
        if not configs:
            logger.error("notice_config_not_found", notice_id=notice_id)
            raise NotFound(f"Notice config not found for notice ID: {notice_id}")
        logger.info(
            "notice_config_fetched", notice_id=notice_id, config_id=configs[0].get("id")
        )
        return configs[0]

    def update_notice_config(self, notice_config: Dict[str, Any]) -> Any:
        """PATCH a full notice configuration."""
        config_id = notice_config["id"]
        result = self._request(
            "PATCH",
            f"/widgets/notices/configs/{config_id}",
            json=notice_config,
            headers=MULTI_REGULATION_HEADERS,
        )
        logger.info("notice_config_updated", config_id=config_id)
        return result

    # --- Purposes ---

    def list_purposes(self) -> List[Dict[str, Any]]:
        """List the organization's purposes with their translations."""
        params = self._organization_params(**{"$translations": "true"})
        data = self._request("GET", "/metadata/purposes", params=params)
        return (data or {}).get("data") or []

    def update_purpose(self, purpose_id: str, description: Any, details: Any) -> Any:
        """PATCH the translatable fields of a purpose."""
        result = self._request(
            "PATCH",
            f"/metadata/purposes/{purpose_id}",
            json={"description": description, "details": details},
        )
        logger.info("purpose_updated", purpose_id=purpose_id)
        return result

    # --- Partners ---

    def list_partners(self, limit: int) -> List[Dict[str, Any]]:
        """List vendor partners known to the API."""
        data = self._request("GET", "/metadata/partners", params={"$limit": limit})
        return (data or {}).get("data") or []


def create_client(api_settings) -> ConsentApiClient:
    """Create an authenticated client from `ConsentApiSettings`."""
    token = fetch_api_token(
        api_settings.BASE_URL,
        api_settings.API_KEY,
        api_settings.API_SECRET,
        timeout=api_settings.TIMEOUT,
    )
    return ConsentApiClient(
        base_url=api_settings.BASE_URL,
        token=token,
        organization_id=api_settings.ORGANIZATION_ID,
        timeout=api_settings.TIMEOUT,
    )
