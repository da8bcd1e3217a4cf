import xml.etree.ElementTree as ET
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.exceptions import DecodingError
from httpcodecs.exceptions import EncodingError
from httpcodecs.media_type import APPLICATION_XML
from httpcodecs.media_type import APPLICATION_XML_SUFFIX
from httpcodecs.media_type import TEXT_XML

XML_MEDIA_TYPES = (APPLICATION_XML, TEXT_XML, APPLICATION_XML_SUFFIX)


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    if not children and not element.attrib:
        return element.text
    value: Dict[str, Any] = {f"@{k}": v for k, v in element.attrib.items()}
    for child in children:
        item = _element_to_value(child)
        if child.tag in value:
            existing = value[child.tag]
            if not isinstance(existing, list):
                value[child.tag] = existing = [existing]
            existing.append(item)
        else:
            value[child.tag] = item
    text = (element.text or "").strip()
    if text:
        value["#text"] = text
    return value


def _value_to_elements(tag: str, value: Any) -> List[ET.Element]:
    if isinstance(value, list):
        return [el for item in value for el in _value_to_elements(tag, item)]
    element = ET.Element(tag)
    if isinstance(value, dict):
        for key, item in value.items():
            if key.startswith("@"):
                element.set(key[1:], str(item))
            elif key == "#text":
                element.text = str(item)
            else:
                element.extend(_value_to_elements(key, item))
    elif value is not None:
        element.text = str(value)
    return [element]


class XmlDecoder(AbstractBufferingDecoder):
    """
    XML → value decoder built on ElementTree.

    Decoding into `ET.Element` returns the parsed root. Any other target
    gets a dict keyed by the root tag, where attributes become "@name"
    keys, repeated children become lists and mixed text lands in "#text".
    """

    media_types = XML_MEDIA_TYPES

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> Any:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise DecodingError(f"XML decoding error: {e}") from e
        if target is ET.Element:
            return root
        return {root.tag: _element_to_value(root)}


class XmlEncoder(AbstractEncoder):
    """
    Encodes an `ET.Element`, or a dict with a single root key, as XML.
    """

    media_types = XML_MEDIA_TYPES

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        if isinstance(value, ET.Element):
            root = value
        elif isinstance(value, dict) and len(value) == 1:
            ((tag, content),) = value.items()
            elements = _value_to_elements(tag, content)
            if len(elements) != 1:
                raise EncodingError("XML document needs a single root")
            root = elements[0]
        else:
            raise EncodingError(
                f"Cannot encode {type(value).__name__} as XML; "
                "expected an Element or a single-root dict"
            )
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)
