"""
Async client for external FDSN web services.

This module provides the upstream side of the portal:
- station/channel metadata queries in text format
- availability extent queries
- dataselect (miniSEED) fetches, buffered or streamed for passthrough

Every call is a single GET with a bounded timeout. There is no retry:
a timeout or connection failure surfaces as UpstreamConnectionError and
the caller decides what to do with it.
"""

from typing import AsyncIterator, Dict, List, Optional
import httpx
import logging

from core.config import settings
from core.exceptions import (
    UpstreamStatusError,
    ServiceNotSupportedError,
    UpstreamConnectionError,
)
from ingestion.extractors.text_parser import (
    parse_station_text,
    parse_channel_text,
    parse_availability_extent,
)
from schemas.fdsn import (
    StationQuery,
    AvailabilityQuery,
    StationTextRow,
    ChannelTextRow,
    AvailabilityExtentRow,
)

logger = logging.getLogger(__name__)

STATION_PATH = "/fdsnws/station/1/query"
AVAILABILITY_EXTENT_PATH = "/fdsnws/availability/1/extent"
DATASELECT_PATH = "/fdsnws/dataselect/1/query"

# Statuses meaning the service does not exist at this upstream
NOT_SUPPORTED_STATUSES = (404, 501)

MAX_ERROR_BODY = 500


class DataselectStream:
    """
    Open upstream dataselect response for byte-exact passthrough.

    The caller must ``await aclose()`` once the body has been relayed.
    """

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        async for chunk in self._response.aiter_raw():
            yield chunk

    async def aclose(self):
        await self._response.aclose()
        await self._client.aclose()


class FDSNClient:
    """
    Client for one upstream FDSN data centre.

    Attributes:
        base_url: Service root, e.g. ``https://service.iris.edu``
        source_name: Used in log lines and error context
        timeout: Request timeout in seconds (default: settings.FDSN_TIMEOUT)
    """

    def __init__(
        self,
        base_url: str,
        source_name: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.source_name = source_name or self.base_url
        self.timeout = timeout if timeout is not None else settings.FDSN_TIMEOUT

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": settings.USER_AGENT},
        )

    async def _get(self, path: str, params: Dict[str, str]) -> Optional[httpx.Response]:
        """
        GET and classify the response.

        Returns:
            The response for HTTP 200, None for HTTP 204

        Raises:
            ServiceNotSupportedError: HTTP 404 or 501
            UpstreamStatusError: Any other non-200 status
            UpstreamConnectionError: Transport failure or timeout
        """
        url = self.base_url + path
        context = {"source_name": self.source_name, "url": url}

        logger.debug(f"GET {url} params={params}")
        try:
            async with self._client() as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamConnectionError(
                f"GET {url}: {type(e).__name__}: {e}",
                context=context,
                original_exception=e
            )

        if response.status_code == 204:
            return None

        if response.status_code != 200:
            body = response.text.strip()
            context["response_body"] = body[:MAX_ERROR_BODY]
            full_url = str(response.request.url) if response.request else url

            if response.status_code in NOT_SUPPORTED_STATUSES:
                raise ServiceNotSupportedError(
                    f"GET {full_url}: status {response.status_code} (service not supported): {body[:MAX_ERROR_BODY]}",
                    status_code=response.status_code,
                    context=context
                )

            raise UpstreamStatusError(
                f"GET {full_url}: status {response.status_code}: {body[:MAX_ERROR_BODY]}",
                status_code=response.status_code,
                context=context
            )

        return response

    # ------------------------------------------------------------------
    # Station service
    # ------------------------------------------------------------------

    async def query_stations(self, query: StationQuery) -> List[StationTextRow]:
        """Station-level text query"""
        params = {"format": "text", "level": "station", **query.to_params()}
        response = await self._get(STATION_PATH, params)
        if response is None:
            return []
        rows = parse_station_text(response.text)
        logger.info(f"Fetched {len(rows)} stations from {self.source_name}")
        return rows

    async def query_channels(self, query: StationQuery) -> List[ChannelTextRow]:
        """Channel-level text query"""
        params = {"format": "text", "level": "channel", **query.to_params()}
        response = await self._get(STATION_PATH, params)
        if response is None:
            return []
        rows = parse_channel_text(response.text)
        logger.info(f"Fetched {len(rows)} channels from {self.source_name}")
        return rows

    # ------------------------------------------------------------------
    # Availability service
    # ------------------------------------------------------------------

    async def query_availability_extent(self, query: AvailabilityQuery) -> List[AvailabilityExtentRow]:
        """Availability extents in text format"""
        params = {"format": "text", **query.to_params()}
        response = await self._get(AVAILABILITY_EXTENT_PATH, params)
        if response is None:
            return []
        return parse_availability_extent(response.text)

    # ------------------------------------------------------------------
    # Dataselect service
    # ------------------------------------------------------------------

    @staticmethod
    def dataselect_params(
        network: str,
        station: str,
        location: str,
        channel: str,
        starttime: str,
        endtime: str
    ) -> Dict[str, str]:
        params = {"net": network, "sta": station}
        if location:
            params["loc"] = location
        params["cha"] = channel
        params["starttime"] = starttime
        params["endtime"] = endtime
        return params

    async def fetch_miniseed(
        self,
        network: str,
        station: str,
        location: str,
        channel: str,
        starttime: str,
        endtime: str
    ) -> bytes:
        """
        Fetch raw miniSEED bytes.

        Returns:
            Body bytes; empty when the upstream has no data (HTTP 204)
        """
        params = self.dataselect_params(network, station, location, channel, starttime, endtime)
        response = await self._get(DATASELECT_PATH, params)
        if response is None:
            return b""
        return response.content

    async def stream_dataselect(self, params: Dict[str, str]) -> DataselectStream:
        """
        Open a streamed dataselect request without classifying the status.

        Raises:
            UpstreamConnectionError: Transport failure or timeout
        """
        url = self.base_url + DATASELECT_PATH
        client = self._client()
        try:
            request = client.build_request("GET", url, params=params)
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise UpstreamConnectionError(
                f"upstream error: {type(e).__name__}: {e}",
                context={"source_name": self.source_name, "url": url},
                original_exception=e
            )
        return DataselectStream(client, response)
