"""
Unit tests for FDSN text rows and StationXML documents
"""

from datetime import datetime
import xml.etree.ElementTree as ET
from protocol import text
from protocol.stationxml import StationXMLBuilder, STATIONXML_NAMESPACE

NS = {"s": STATIONXML_NAMESPACE}


class TestTextRows:

    def test_network_line(self):
        line = text.network_line("IU", "Global Seismograph Network", datetime(1988, 1, 1), None, 3)
        assert line == "IU|Global Seismograph Network|1988-01-01T00:00:00||3\n"

    def test_station_line_formatting(self):
        line = text.station_line(
            "IU", "ANMO", 34.9459, -106.4572, 1850.0, "Albuquerque",
            datetime(2002, 11, 19, 21, 7), None
        )
        assert line == "IU|ANMO|34.945900|-106.457200|1850.0|Albuquerque|2002-11-19T21:07:00|\n"

    def test_channel_line_formatting(self):
        line = text.channel_line(
            "IU", "ANMO", "00", "BHZ",
            34.9459, -106.4572, 1850.0, 100.0, 0.0, -90.0,
            "STS-6A", 1.9e9, 0.02, "M/S", 40.0,
            datetime(2018, 7, 9, 20, 45), None
        )
        assert line == (
            "IU|ANMO|00|BHZ|34.945900|-106.457200|1850.0|100.0|0.0|-90.0|"
            "STS-6A|1.9000e+09|0.0200|M/S|40.0|2018-07-09T20:45:00|\n"
        )
        assert line.count("|") == text.CHANNEL_HEADER.count("|")

    def test_channel_line_missing_values_are_empty(self):
        line = text.channel_line(
            "IU", "ANMO", "", "LHZ",
            None, None, None, None, None, None,
            "", None, None, "", None, None, None
        )
        assert line == "IU|ANMO||LHZ" + "|" * 13 + "\n"

    def test_availability_line(self):
        line = text.availability_line(
            "IU", "ANMO", "00", "BHZ", datetime(2018, 7, 9, 20, 45), datetime(2024, 1, 1)
        )
        assert line == "IU|ANMO|00|BHZ|2018-07-09T20:45:00|2024-01-01T00:00:00\n"


class TestStationXMLBuilder:

    def build(self) -> str:
        builder = StationXMLBuilder("Test Portal", "Tester", created=datetime(2024, 1, 15, 10, 30))
        network = builder.add_network("IU", "Global Seismograph Network", datetime(1988, 1, 1))
        station = builder.add_station(
            network, "ANMO", 34.9459, -106.4572, 1850.0, "Albuquerque",
            datetime(2002, 11, 19, 21, 7)
        )
        builder.add_channel(
            station, "BHZ", "00", 34.9459, -106.4572, 1850.0, 100.0,
            azimuth=0.0, dip=-90.0, sample_rate=40.0,
            sensor_description="STS-6A",
            start_time=datetime(2018, 7, 9, 20, 45)
        )
        builder.add_channel(station, "LHZ", "", None, None, None, None)
        return builder.to_string()

    def test_declaration_and_indentation(self):
        document = self.build()
        assert document.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<FDSNStationXML')
        assert "\n  <Source>Test Portal</Source>" in document
        assert document.endswith("\n")

    def test_root_header(self):
        root = ET.fromstring(self.build().split("\n", 1)[1])

        assert root.tag == f"{{{STATIONXML_NAMESPACE}}}FDSNStationXML"
        assert root.get("schemaVersion") == "1.1"
        assert root.find("s:Sender", NS).text == "Tester"
        assert root.find("s:Created", NS).text == "2024-01-15T10:30:00Z"

    def test_nesting_and_values(self):
        root = ET.fromstring(self.build().split("\n", 1)[1])

        network = root.find("s:Network", NS)
        assert network.get("code") == "IU"
        assert network.get("startDate") == "1988-01-01T00:00:00"
        assert network.get("endDate") is None
        assert network.find("s:Description", NS).text == "Global Seismograph Network"

        station = network.find("s:Station", NS)
        assert station.get("code") == "ANMO"
        assert float(station.find("s:Latitude", NS).text) == 34.9459
        assert station.find("s:Site/s:Name", NS).text == "Albuquerque"

        bhz, lhz = station.findall("s:Channel", NS)
        assert bhz.get("locationCode") == "00"
        assert float(bhz.find("s:Dip", NS).text) == -90.0
        assert float(bhz.find("s:SampleRate", NS).text) == 40.0
        assert bhz.find("s:Sensor/s:Description", NS).text == "STS-6A"

    def test_optional_elements_omitted_and_required_default_to_zero(self):
        root = ET.fromstring(self.build().split("\n", 1)[1])
        lhz = root.findall("s:Network/s:Station/s:Channel", NS)[1]

        assert lhz.get("locationCode") == ""
        assert lhz.find("s:Azimuth", NS) is None
        assert lhz.find("s:Dip", NS) is None
        assert lhz.find("s:SampleRate", NS) is None
        assert lhz.find("s:Sensor", NS) is None
        assert float(lhz.find("s:Latitude", NS).text) == 0.0
        assert float(lhz.find("s:Depth", NS).text) == 0.0
