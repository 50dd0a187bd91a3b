from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from xml.etree.ElementTree import Element
from xml.sax.saxutils import escape

import requests
from defusedxml import ElementTree

from .config import DEFAULT_TIMEOUT
from .connection import Session
from .exceptions import MetadataAPIError

__author__ = "Kevin Steptoe"
__copyright__ = "Kevin Steptoe"
__license__ = "MIT"

_logger = logging.getLogger(__name__)

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
METADATA_NS = "http://soap.sforce.com/2006/04/metadata"

_ENVELOPE = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    f'<soapenv:Envelope xmlns:soapenv="{SOAP_ENV_NS}" xmlns:met="{METADATA_NS}">'
    "<soapenv:Header><met:SessionHeader><met:sessionId>{session_id}</met:sessionId>"
    "</met:SessionHeader></soapenv:Header>"
    "<soapenv:Body>{body}</soapenv:Body>"
    "</soapenv:Envelope>"
)


# ----------------------------------------------------------------------
# Result types
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class MetadataTypeDescriptor:
    """One entry of describeMetadata's ``metadataObjects``."""

    xml_name: str
    in_folder: bool = False
    directory_name: Optional[str] = None
    suffix: Optional[str] = None
    meta_file: bool = False
    child_xml_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DescribeResult:
    metadata_objects: List[MetadataTypeDescriptor] = field(default_factory=list)
    organization_namespace: Optional[str] = None
    partial_save_allowed: bool = False
    test_required: bool = False


@dataclass(frozen=True)
class MetadataMemberDescriptor:
    """One listMetadata ``FileProperties`` entry; unknown fields are dropped."""

    full_name: str
    type: Optional[str] = None
    file_name: Optional[str] = None
    id: Optional[str] = None
    namespace_prefix: Optional[str] = None
    manageable_state: Optional[str] = None
    last_modified_date: Optional[str] = None


# ----------------------------------------------------------------------
# Client
# ----------------------------------------------------------------------
class MetadataAPI:
    """Salesforce Metadata API client covering describeMetadata and listMetadata."""

    def __init__(self, session: Session, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.sf_session = session
        self.timeout = timeout
        self.http = requests.Session()

    # --------------------------- Public methods -----------------------

    def describe(self, api_version: str) -> DescribeResult:
        """Return the metadata types available in the org."""
        body = (
            "<met:describeMetadata>"
            f"<met:asOfVersion>{escape(api_version)}</met:asOfVersion>"
            "</met:describeMetadata>"
        )
        results = self._call("describeMetadata", body, api_version)
        if not results:
            return DescribeResult()
        found = results[0]

        return DescribeResult(
            metadata_objects=[
                _type_descriptor(el) for el in found.findall(_m("metadataObjects"))
            ],
            organization_namespace=_text(found, "organizationNamespace"),
            partial_save_allowed=_flag(found, "partialSaveAllowed"),
            test_required=_flag(found, "testRequired"),
        )

    def list(self, query: Dict[str, Any], api_version: str) -> List[MetadataMemberDescriptor]:
        """Return the members matching ``query`` ({"type": ..., "folder": ...})."""
        folder = query.get("folder")
        folder_xml = "" if folder is None else f"<met:folder>{escape(folder)}</met:folder>"
        body = (
            "<met:listMetadata>"
            "<met:queries>"
            f"{folder_xml}<met:type>{escape(query['type'])}</met:type>"
            "</met:queries>"
            f"<met:asOfVersion>{escape(api_version)}</met:asOfVersion>"
            "</met:listMetadata>"
        )
        results = self._call("listMetadata", body, api_version)
        return [_member_descriptor(el) for el in results]

    # --------------------------- Internal helpers --------------------

    def _endpoint(self, api_version: str) -> str:
        return f"{self.sf_session.instance_url}/services/Soap/m/{api_version}"

    def _call(self, operation: str, body: str, api_version: str) -> List[Element]:
        """POST one SOAP operation and return the ``result`` elements of its response."""
        url = self._endpoint(api_version)
        envelope = _ENVELOPE.format(session_id=escape(self.sf_session.access_token), body=body)
        headers = {
            "Content-Type": "text/xml; charset=UTF-8",
            "SOAPAction": f'"{operation}"',
        }

        _logger.debug("POST %s (%s)", url, operation)
        r = self.http.post(url, data=envelope.encode("utf-8"), headers=headers, timeout=self.timeout)

        try:
            root = ElementTree.fromstring(r.content)
        except ElementTree.ParseError:
            root = None

        if root is not None:
            fault = root.find(f"{{{SOAP_ENV_NS}}}Body/{{{SOAP_ENV_NS}}}Fault")
            if fault is not None:
                code = (fault.findtext("faultcode") or "").strip() or "UNKNOWN"
                msg = (fault.findtext("faultstring") or "").strip()
                _logger.error("%s fault for %s: %s %s", operation, url, code, msg)
                raise MetadataAPIError(code, msg, r.status_code)

        if r.status_code >= 400:
            _logger.error("HTTP %s error for %s: %s", r.status_code, url, r.text[:500])
            raise MetadataAPIError(f"HTTP {r.status_code}", r.reason or "request failed", r.status_code)

        if root is None:
            raise MetadataAPIError("INVALID_RESPONSE", f"{operation} response is not XML", r.status_code)

        response = root.find(f"{{{SOAP_ENV_NS}}}Body/{_m(operation + 'Response')}")
        if response is None:
            raise MetadataAPIError(
                "INVALID_RESPONSE", f"{operation} response has no {operation}Response", r.status_code
            )

        results = response.findall(_m("result"))
        _logger.debug("%s returned %d result element(s)", operation, len(results))
        return results


# ----------------------------------------------------------------------
# XML helpers
# ----------------------------------------------------------------------
def _m(tag: str) -> str:
    return f"{{{METADATA_NS}}}{tag}"


def _text(el: Element, tag: str) -> Optional[str]:
    value = el.findtext(_m(tag))
    return value if value else None


def _flag(el: Element, tag: str) -> bool:
    return (el.findtext(_m(tag)) or "").strip().lower() == "true"


def _type_descriptor(el: Element) -> MetadataTypeDescriptor:
    return MetadataTypeDescriptor(
        xml_name=el.findtext(_m("xmlName")) or "",
        in_folder=_flag(el, "inFolder"),
        directory_name=_text(el, "directoryName"),
        suffix=_text(el, "suffix"),
        meta_file=_flag(el, "metaFile"),
        child_xml_names=tuple(c.text for c in el.findall(_m("childXmlNames")) if c.text),
    )


def _member_descriptor(el: Element) -> MetadataMemberDescriptor:
    return MetadataMemberDescriptor(
        full_name=el.findtext(_m("fullName")) or "",
        type=_text(el, "type"),
        file_name=_text(el, "fileName"),
        id=_text(el, "id"),
        namespace_prefix=_text(el, "namespacePrefix"),
        manageable_state=_text(el, "manageableState"),
        last_modified_date=_text(el, "lastModifiedDate"),
    )
