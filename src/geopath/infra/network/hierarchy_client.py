from __future__ import annotations

"""
HTTP Hierarchy Provider.

Fetches one page of geographic hierarchy nodes per request from the
registration backend:

    GET {base_url}/api/geo/{mode}/{level}?parentId={id}  ->  {"nodes": [...]}

Transport failures, non-2xx responses and malformed payloads are all
reported as ChildrenFetchError so the selection tree can roll the node back
and let the user retry.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from geopath.domain.errors import ChildrenFetchError
from geopath.domain.selection_models import ChildRecord, ChildrenRequest, HierarchyProvider
from geopath.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


class HttpHierarchyProvider(HierarchyProvider):
    """
    Hierarchy provider backed by the geo REST endpoint.

    Args:
        base_url: Backend root, e.g. 'http://localhost:3000'.
        timeout: Per-request timeout in seconds.
        session: Optional pre-configured requests session.
    """

    def __init__(
            self,
            base_url: str,
            timeout: float = DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT, "Cache-Control": "no-cache"})

    def fetch_children(self, request: ChildrenRequest) -> List[ChildRecord]:
        url = f"{self._base_url}/api/geo/{request.hierarchy_mode}/{request.level_name}"
        params: Dict[str, str] = {}
        if request.parent_id is not None:
            params["parentId"] = request.parent_id

        logger.debug(f"Network: GET {url} params={params}")
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.Timeout as e:
            raise ChildrenFetchError(
                f"Hierarchy request timed out after {self._timeout}s: {url}",
                node_id=request.parent_id, cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise ChildrenFetchError(
                f"Hierarchy request failed: {e}", node_id=request.parent_id, cause=e
            ) from e
        except ValueError as e:
            raise ChildrenFetchError(
                f"Hierarchy response is not valid JSON: {url}", node_id=request.parent_id, cause=e
            ) from e

        return self._parse_nodes(payload, request)

    def close(self) -> None:
        self._session.close()

    @staticmethod
    def _parse_nodes(payload: Any, request: ChildrenRequest) -> List[ChildRecord]:
        """Convert the JSON payload into ChildRecords, keeping provider order."""
        if not isinstance(payload, dict) or not isinstance(payload.get("nodes"), list):
            raise ChildrenFetchError(
                "Malformed hierarchy payload: expected an object with a 'nodes' list.",
                node_id=request.parent_id,
            )

        records: List[ChildRecord] = []
        for raw in payload["nodes"]:
            if not isinstance(raw, dict):
                logger.warning(f"Network: skipping non-object hierarchy node {raw!r}")
                continue
            try:
                records.append(ChildRecord.from_mapping(raw))
            except ValueError as e:
                logger.warning(f"Network: skipping invalid hierarchy node: {e}")

        logger.info(
            f"Network: {len(records)} {request.level_name} received for "
            f"{request.hierarchy_mode}/{request.parent_id or '<top>'}."
        )
        return records
