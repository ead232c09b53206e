"""
Minimal FDSN StationXML 1.1 document builder.

Only the elements the store can round-trip are produced: network, station
and channel identity, epochs, coordinates, orientation, sample rate and
sensor description. Instrument responses are not emitted.
"""

from datetime import datetime
from typing import Optional
import xml.etree.ElementTree as ET

from protocol.timecodec import format_time

STATIONXML_NAMESPACE = "http://www.fdsn.org/xml/station/1"
SCHEMA_VERSION = "1.1"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _epoch_attrs(element: ET.Element, start: Optional[datetime], end: Optional[datetime]):
    if start is not None:
        element.set("startDate", format_time(start))
    if end is not None:
        element.set("endDate", format_time(end))


def _value(parent: ET.Element, tag: str, value: Optional[float]) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = str(float(value if value is not None else 0.0))
    return child


class StationXMLBuilder:
    """
    Builds an FDSNStationXML document top-down.

    Usage:
        builder = StationXMLBuilder(source="Portal", sender="Portal")
        net = builder.add_network("IU", "Global Seismograph Network")
        sta = builder.add_station(net, "ANMO", 34.9459, -106.4572, 1850.0, "Albuquerque")
        builder.add_channel(sta, "BHZ", "00", ...)
        xml_text = builder.to_string()
    """

    def __init__(self, source: str, sender: str, created: Optional[datetime] = None):
        self.root = ET.Element(
            "FDSNStationXML",
            {"xmlns": STATIONXML_NAMESPACE, "schemaVersion": SCHEMA_VERSION},
        )
        ET.SubElement(self.root, "Source").text = source
        ET.SubElement(self.root, "Sender").text = sender
        created = created or datetime.utcnow()
        ET.SubElement(self.root, "Created").text = format_time(created) + "Z"

    def add_network(
        self,
        code: str,
        description: str = "",
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> ET.Element:
        network = ET.SubElement(self.root, "Network", {"code": code})
        _epoch_attrs(network, start_time, end_time)
        if description:
            ET.SubElement(network, "Description").text = description
        return network

    def add_station(
        self,
        network: ET.Element,
        code: str,
        latitude: Optional[float],
        longitude: Optional[float],
        elevation: Optional[float],
        site_name: str = "",
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> ET.Element:
        station = ET.SubElement(network, "Station", {"code": code})
        _epoch_attrs(station, start_time, end_time)
        _value(station, "Latitude", latitude)
        _value(station, "Longitude", longitude)
        _value(station, "Elevation", elevation)
        site = ET.SubElement(station, "Site")
        ET.SubElement(site, "Name").text = site_name or ""
        return station

    def add_channel(
        self,
        station: ET.Element,
        code: str,
        location_code: str,
        latitude: Optional[float],
        longitude: Optional[float],
        elevation: Optional[float],
        depth: Optional[float],
        azimuth: Optional[float] = None,
        dip: Optional[float] = None,
        sample_rate: Optional[float] = None,
        sensor_description: str = "",
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> ET.Element:
        channel = ET.SubElement(
            station, "Channel", {"code": code, "locationCode": location_code or ""}
        )
        _epoch_attrs(channel, start_time, end_time)
        _value(channel, "Latitude", latitude)
        _value(channel, "Longitude", longitude)
        _value(channel, "Elevation", elevation)
        _value(channel, "Depth", depth)
        if azimuth is not None:
            _value(channel, "Azimuth", azimuth)
        if dip is not None:
            _value(channel, "Dip", dip)
        if sample_rate is not None:
            _value(channel, "SampleRate", sample_rate)
        if sensor_description:
            sensor = ET.SubElement(channel, "Sensor")
            ET.SubElement(sensor, "Description").text = sensor_description
        return channel

    def to_string(self) -> str:
        """Serialize with an XML declaration and 2-space indentation"""
        ET.indent(self.root, space="  ")
        return XML_DECLARATION + ET.tostring(self.root, encoding="unicode") + "\n"
