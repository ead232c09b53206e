"""
Static WADL descriptions of the served FDSN web services
"""

from typing import List, Sequence, Tuple
import xml.etree.ElementTree as ET

WADL_NAMESPACE = "http://wadl.dev.java.net/2009/02"
XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"

# (name, xsd type, required, default)
Param = Tuple[str, str, bool, str]

CODE_PARAMS: List[Param] = [
    ("net", "xsd:string", False, ""),
    ("sta", "xsd:string", False, ""),
    ("loc", "xsd:string", False, ""),
    ("cha", "xsd:string", False, ""),
]

TIME_PARAMS: List[Param] = [
    ("starttime", "xsd:dateTime", False, ""),
    ("endtime", "xsd:dateTime", False, ""),
]


def build_wadl(base: str, resources: Sequence[Tuple[str, List[Param], List[str]]]) -> str:
    """
    Args:
        base: Service base path, e.g. ``/fdsnws/station/1/``
        resources: (path, params, response media types) per query resource
    """
    application = ET.Element("application", {"xmlns": WADL_NAMESPACE, "xmlns:xsd": XSD_NAMESPACE})
    root = ET.SubElement(application, "resources", {"base": base})

    for path, params, media_types in resources:
        resource = ET.SubElement(root, "resource", {"path": path})
        for method_name in ("GET", "POST"):
            method = ET.SubElement(resource, "method", {"name": method_name})
            request = ET.SubElement(method, "request")
            for name, xsd_type, required, default in params:
                attrs = {"name": name, "style": "query", "type": xsd_type}
                if required:
                    attrs["required"] = "true"
                if default:
                    attrs["default"] = default
                ET.SubElement(request, "param", attrs)
            response = ET.SubElement(method, "response")
            for media_type in media_types:
                ET.SubElement(response, "representation", {"mediaType": media_type})

    version = ET.SubElement(root, "resource", {"path": "version"})
    ET.SubElement(version, "method", {"name": "GET"})

    ET.indent(application, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(application, encoding="unicode") + "\n"


STATION_WADL = build_wadl("/fdsnws/station/1/", [
    (
        "query",
        CODE_PARAMS + TIME_PARAMS + [
            ("level", "xsd:string", False, "station"),
            ("format", "xsd:string", False, "xml"),
            ("minlat", "xsd:float", False, ""),
            ("maxlat", "xsd:float", False, ""),
            ("minlon", "xsd:float", False, ""),
            ("maxlon", "xsd:float", False, ""),
        ],
        ["application/xml", "text/plain"],
    ),
])

DATASELECT_WADL = build_wadl("/fdsnws/dataselect/1/", [
    (
        "query",
        [
            ("net", "xsd:string", True, ""),
            ("sta", "xsd:string", True, ""),
            ("loc", "xsd:string", False, ""),
            ("cha", "xsd:string", True, ""),
            ("starttime", "xsd:dateTime", True, ""),
            ("endtime", "xsd:dateTime", True, ""),
        ],
        ["application/vnd.fdsn.mseed"],
    ),
])

AVAILABILITY_WADL = build_wadl("/fdsnws/availability/1/", [
    ("query", CODE_PARAMS + TIME_PARAMS + [("format", "xsd:string", False, "text")], ["text/plain"]),
    ("extent", CODE_PARAMS + TIME_PARAMS + [("format", "xsd:string", False, "text")], ["text/plain"]),
])
