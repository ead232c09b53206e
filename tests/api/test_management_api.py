"""
API endpoint tests for the management API (/api/v1)
"""

import pytest
import pytest_asyncio
import httpx
import respx
from datetime import datetime
from sqlalchemy import select
from ingestion.loaders.availability_loader import AvailabilityLoader
from ingestion.loaders.station_loader import StationLoader
from models.inventory import Station
from schemas.fdsn import ImportChannel

IRIS_URL = "https://service.iris.edu"
STATION_URL = f"{IRIS_URL}/fdsnws/station/1/query"
EXTENT_URL = f"{IRIS_URL}/fdsnws/availability/1/extent"
DATASELECT_URL = f"{IRIS_URL}/fdsnws/dataselect/1/query"

STATIONS = (
    "#Network|Station|Latitude|Longitude|Elevation|SiteName|StartTime|EndTime\n"
    "IU|ANMO|34.9459|-106.4572|1850.0|Albuquerque, New Mexico, USA|2002-11-19T21:07:00|\n"
    "IU|COLA|64.8738|-147.8511|200.0|College Outpost, Alaska, USA|1996-01-01T00:00:00|\n"
)


@pytest_asyncio.fixture
async def anmo_station(db_session, iris_source):
    """IU.ANMO with BHZ and BH1; only BHZ has availability. Returns the station id."""
    loader = StationLoader(db_session)
    await loader.import_stations(iris_source.id, [
        ImportChannel(network_code="IU", station_code="ANMO", latitude=34.9459, longitude=-106.4572,
                      location_code="00", channel_code="BHZ", sample_rate=40.0),
        ImportChannel(network_code="IU", station_code="ANMO", latitude=34.9459, longitude=-106.4572,
                      location_code="00", channel_code="BH1", sample_rate=40.0),
    ])
    ids = await loader.lookup_channel_ids(iris_source.id, "IU", "ANMO")
    await AvailabilityLoader(db_session).upsert(ids["00.BHZ"], datetime(2018, 1, 1), datetime(2024, 1, 1))

    result = await db_session.execute(select(Station.id).where(Station.code == "ANMO"))
    return result.scalar()


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_ok(self, api_client):
        response = await api_client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["database_connected"] is True

    @pytest.mark.asyncio
    async def test_root(self, api_client):
        response = await api_client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/api/v1/health"

    @pytest.mark.asyncio
    async def test_request_id_header(self, api_client):
        response = await api_client.get("/api/v1/health")
        assert len(response.headers["X-Request-ID"]) == 36
        assert "X-API-Latency-ms" in response.headers


class TestSources:

    @pytest.mark.asyncio
    async def test_create_get_update_delete(self, api_client):
        response = await api_client.post("/api/v1/sources", json={
            "name": "GEOFON",
            "base_url": "https://geofon.gfz-potsdam.de/",
            "description": "GFZ",
        })
        assert response.status_code == 201
        created = response.json()
        assert created["base_url"] == "https://geofon.gfz-potsdam.de"
        assert created["enabled"] is True
        source_id = created["id"]

        response = await api_client.get(f"/api/v1/sources/{source_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "GEOFON"

        response = await api_client.put(f"/api/v1/sources/{source_id}", json={
            "name": "GEOFON",
            "base_url": "https://geofon.gfz.de",
            "enabled": False,
        })
        assert response.status_code == 200
        assert response.json()["enabled"] is False
        assert response.json()["base_url"] == "https://geofon.gfz.de"

        response = await api_client.delete(f"/api/v1/sources/{source_id}")
        assert response.status_code == 204

        response = await api_client.get(f"/api/v1/sources/{source_id}")
        assert response.status_code == 404
        assert response.json()["error"] == "Resource not found"

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected(self, api_client, iris_source):
        response = await api_client.post("/api/v1/sources", json={"name": "IRIS", "base_url": "https://x.org"})
        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_missing_base_url_rejected(self, api_client):
        response = await api_client.post("/api/v1/sources", json={"name": "NOURL"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    @pytest.mark.asyncio
    async def test_list_includes_counts(self, api_client, iris_source, anmo_station):
        response = await api_client.get("/api/v1/sources")
        assert response.status_code == 200
        iris = next(s for s in response.json() if s["name"] == "IRIS")
        assert iris["network_count"] == 1
        assert iris["station_count"] == 1
        assert iris["availability_count"] == 1

    @pytest.mark.asyncio
    async def test_delete_cascades_inventory(self, api_client, iris_source, anmo_station):
        response = await api_client.delete(f"/api/v1/sources/{iris_source.id}")
        assert response.status_code == 204

        response = await api_client.get("/api/v1/stations")
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_source_networks_and_stations(self, api_client, iris_source, anmo_station):
        response = await api_client.get(f"/api/v1/sources/{iris_source.id}/networks")
        assert [n["code"] for n in response.json()] == ["IU"]

        response = await api_client.get(f"/api/v1/sources/{iris_source.id}/stations", params={"network": "IU"})
        data = response.json()
        assert data["total"] == 1
        assert data["stations"][0]["code"] == "ANMO"

        response = await api_client.get("/api/v1/sources/999/networks")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_explore_stations_live(self, api_client, iris_source):
        with respx.mock:
            route = respx.get(STATION_URL).mock(return_value=httpx.Response(200, text=STATIONS))
            response = await api_client.get(
                f"/api/v1/sources/{iris_source.id}/explore/stations", params={"net": "IU", "minlat": "30"}
            )

        assert response.status_code == 200
        assert [row["station"] for row in response.json()] == ["ANMO", "COLA"]
        params = route.calls.last.request.url.params
        assert params["net"] == "IU"
        assert params["minlat"] == "30"
        assert params["level"] == "station"

    @pytest.mark.asyncio
    async def test_explore_upstream_failure_is_502(self, api_client, iris_source):
        with respx.mock:
            respx.get(STATION_URL).mock(return_value=httpx.Response(500, text="boom"))
            response = await api_client.get(f"/api/v1/sources/{iris_source.id}/explore/stations")

        assert response.status_code == 502
        assert response.json()["error"] == "Upstream error"


class TestImport:

    @pytest.mark.asyncio
    async def test_import_stations(self, api_client, iris_source, anmo_channels_text, anmo_extent_text):
        with respx.mock:
            respx.get(STATION_URL).mock(return_value=httpx.Response(200, text=anmo_channels_text))
            respx.get(EXTENT_URL).mock(return_value=httpx.Response(200, text=anmo_extent_text))

            response = await api_client.post("/api/v1/import/stations", json={
                "source_id": iris_source.id,
                "network": "IU",
                "station": "ANMO",
            })

        assert response.status_code == 200
        assert response.json() == {
            "imported": 2,
            "availability_count": 2,
            "availability_status": "ok",
            "availability_error": None,
        }

        response = await api_client.get("/api/v1/import/refresh-targets")
        assert response.json() == [
            {"source_id": iris_source.id, "source_name": "IRIS", "network_code": "IU"}
        ]

    @pytest.mark.asyncio
    async def test_import_not_supported_availability(self, api_client, iris_source, anmo_channels_text):
        with respx.mock:
            respx.get(STATION_URL).mock(return_value=httpx.Response(200, text=anmo_channels_text))
            respx.get(EXTENT_URL).mock(return_value=httpx.Response(404))

            response = await api_client.post("/api/v1/import/stations", json={"source_id": iris_source.id})

        data = response.json()
        assert response.status_code == 200
        assert data["imported"] == 2
        assert data["availability_status"] == "not_supported"

    @pytest.mark.asyncio
    async def test_import_upstream_failure_is_502(self, api_client, iris_source):
        with respx.mock:
            respx.get(STATION_URL).mock(return_value=httpx.Response(500, text="boom"))
            response = await api_client.post("/api/v1/import/stations", json={"source_id": iris_source.id})

        assert response.status_code == 502

        response = await api_client.get("/api/v1/stats")
        assert response.json()["channels"] == 0

    @pytest.mark.asyncio
    async def test_import_unknown_source(self, api_client):
        response = await api_client.post("/api/v1/import/stations", json={"source_id": 999})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_import_disabled_source(self, api_client, db_session, iris_source):
        iris_source.enabled = False
        await db_session.commit()

        response = await api_client.post("/api/v1/import/stations", json={"source_id": iris_source.id})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_import_with_availability_disabled(self, api_client, iris_source, anmo_channels_text, monkeypatch):
        from core.config import settings
        monkeypatch.setattr(settings, "AVAILABILITY_ENABLED", False)

        with respx.mock:
            respx.get(STATION_URL).mock(return_value=httpx.Response(200, text=anmo_channels_text))
            response = await api_client.post("/api/v1/import/stations", json={"source_id": iris_source.id})

        assert response.json()["availability_status"] == "not_configured"


class TestStations:

    @pytest.mark.asyncio
    async def test_list_stations(self, api_client, anmo_station):
        response = await api_client.get("/api/v1/stations", params={"network": "IU"})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        station = data["stations"][0]
        assert station["code"] == "ANMO"
        assert station["network_code"] == "IU"
        assert station["source_name"] == "IRIS"
        assert station["has_availability"] is True

    @pytest.mark.asyncio
    async def test_list_stations_no_match(self, api_client, anmo_station):
        response = await api_client.get("/api/v1/stations", params={"station": "COLA"})
        assert response.json() == {"stations": [], "total": 0}

    @pytest.mark.asyncio
    async def test_limit_validation(self, api_client):
        response = await api_client.get("/api/v1/stations", params={"limit": 5000})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_station_detail(self, api_client, anmo_station):
        response = await api_client.get(f"/api/v1/stations/{anmo_station}")
        assert response.status_code == 200
        data = response.json()
        assert [c["code"] for c in data["channels"]] == ["BH1", "BHZ"]
        assert len(data["availability"]) == 2
        assert data["availability"][0]["earliest"] is None

    @pytest.mark.asyncio
    async def test_station_availability(self, api_client, anmo_station):
        response = await api_client.get(f"/api/v1/stations/{anmo_station}/availability")
        assert response.status_code == 200
        bhz = next(item for item in response.json() if item["channel_code"] == "BHZ")
        assert bhz["latest"].startswith("2024-01-01T00:00:00")

    @pytest.mark.asyncio
    async def test_missing_station(self, api_client):
        assert (await api_client.get("/api/v1/stations/999")).status_code == 404
        assert (await api_client.get("/api/v1/stations/999/availability")).status_code == 404
        assert (await api_client.delete("/api/v1/stations/999")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_station(self, api_client, anmo_station):
        response = await api_client.delete(f"/api/v1/stations/{anmo_station}")
        assert response.status_code == 204

        stats = (await api_client.get("/api/v1/stats")).json()
        assert stats["stations"] == 0
        assert stats["channels"] == 0
        assert stats["networks"] == 1

    @pytest.mark.asyncio
    async def test_networks(self, api_client, anmo_station):
        response = await api_client.get("/api/v1/networks")
        assert [n["code"] for n in response.json()] == ["IU"]

    @pytest.mark.asyncio
    async def test_stats(self, api_client, anmo_station):
        response = await api_client.get("/api/v1/stats")
        assert response.json() == {"sources": 1, "networks": 1, "stations": 1, "channels": 2}


class TestWaveformProxy:

    QUERY = {"net": "IU", "sta": "ANMO", "loc": "00", "cha": "BHZ",
             "starttime": "2024-01-01T00:00:00", "endtime": "2024-01-01T00:01:00"}

    @pytest.mark.asyncio
    async def test_proxy_returns_miniseed(self, api_client, iris_source):
        with respx.mock:
            route = respx.get(DATASELECT_URL).mock(return_value=httpx.Response(200, content=b"\x00MSEED"))
            response = await api_client.get(
                "/api/v1/waveforms/proxy", params={"source_id": iris_source.id, **self.QUERY}
            )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/vnd.fdsn.mseed"
        assert response.content == b"\x00MSEED"
        assert route.calls.last.request.url.params["loc"] == "00"

    @pytest.mark.asyncio
    async def test_proxy_no_data(self, api_client, iris_source):
        with respx.mock:
            respx.get(DATASELECT_URL).mock(return_value=httpx.Response(204))
            response = await api_client.get(
                "/api/v1/waveforms/proxy", params={"source_id": iris_source.id, **self.QUERY}
            )

        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_proxy_upstream_error(self, api_client, iris_source):
        with respx.mock:
            respx.get(DATASELECT_URL).mock(return_value=httpx.Response(503, text="busy"))
            response = await api_client.get(
                "/api/v1/waveforms/proxy", params={"source_id": iris_source.id, **self.QUERY}
            )

        assert response.status_code == 502

    @pytest.mark.asyncio
    async def test_proxy_requires_channel(self, api_client, iris_source):
        query = dict(self.QUERY)
        del query["cha"]
        response = await api_client.get("/api/v1/waveforms/proxy", params={"source_id": iris_source.id, **query})
        assert response.status_code == 400
