"""
Gmail mail-filter XML export.

Serializes generated entries into the Atom feed accepted by Gmail's
"Import filters" settings page, and parses such feeds back into entries.

Output shape:
    <feed xmlns="http://www.w3.org/2005/Atom"
          xmlns:apps="http://schemas.google.com/apps/2006">
      <title>Mail Filters</title>
      <id>tag:mail.google.com,2008:filters:1700000000000</id>
      <updated>2024-01-01T00:00:00Z</updated>
      <entry>
        <category term="filter"/>
        <title>Mail Filter</title>
        <id>tag:mail.google.com,2008:filter:1700000000000</id>
        <updated>2024-01-01T00:00:00Z</updated>
        <content/>
        <apps:property name="from" value="boss@example.com"/>
        <apps:property name="label" value="work"/>
      </entry>
    </feed>
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union

from lxml import etree

from filtergen.error_handling import ConfigurationError
from filtergen.models import Entry, Property, PropertyName

logger = logging.getLogger(__name__)

ATOM_NS = 'http://www.w3.org/2005/Atom'
APPS_NS = 'http://schemas.google.com/apps/2006'
NSMAP = {None: ATOM_NS, 'apps': APPS_NS}
XPATH_NS = {'atom': ATOM_NS, 'apps': APPS_NS}

FEED_TITLE = 'Mail Filters'
ENTRY_TITLE = 'Mail Filter'
ID_PREFIX = 'tag:mail.google.com,2008:'


def _atom(tag: str) -> str:
    return f'{{{ATOM_NS}}}{tag}'


def _format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def _add_text(parent, tag: str, text: str):
    element = etree.SubElement(parent, _atom(tag))
    element.text = text
    return element


def _add_property(entry_element, prop: Property) -> None:
    element = etree.SubElement(entry_element, f'{{{APPS_NS}}}property')
    element.set('name', prop.name.value)
    element.set('value', prop.value)


def entries_to_xml(
    entries: Iterable[Entry],
    author_name: Optional[str] = None,
    author_email: Optional[str] = None,
    updated: Optional[datetime] = None
) -> str:
    """
    Render entries as a Gmail filter feed.

    Args:
        entries: Entries in output order
        author_name: Optional feed author name
        author_email: Optional feed author email
        updated: Timestamp for the feed (default: now); also seeds the ids

    Returns:
        XML document as a string, including the XML declaration
    """
    updated = updated or datetime.now(timezone.utc)
    stamp = _format_timestamp(updated)
    base_id = int(updated.timestamp() * 1000)

    root = etree.Element(_atom('feed'), nsmap=NSMAP)
    _add_text(root, 'title', FEED_TITLE)
    _add_text(root, 'id', f'{ID_PREFIX}filters:{base_id}')
    _add_text(root, 'updated', stamp)

    if author_name or author_email:
        author = etree.SubElement(root, _atom('author'))
        if author_name:
            _add_text(author, 'name', author_name)
        if author_email:
            _add_text(author, 'email', author_email)

    count = 0
    for index, entry in enumerate(entries):
        entry_element = etree.SubElement(root, _atom('entry'))
        category = etree.SubElement(entry_element, _atom('category'))
        category.set('term', 'filter')
        _add_text(entry_element, 'title', ENTRY_TITLE)
        _add_text(entry_element, 'id', f'{ID_PREFIX}filter:{base_id + index}')
        _add_text(entry_element, 'updated', stamp)
        etree.SubElement(entry_element, _atom('content'))
        for prop in entry:
            _add_property(entry_element, prop)
        count += 1

    logger.debug(f"Serialized {count} entries to XML")
    xml_bytes = etree.tostring(
        root,
        encoding='utf-8',
        pretty_print=True,
        xml_declaration=True
    )
    return xml_bytes.decode('utf-8')


def write_xml(entries: Iterable[Entry], path: Union[str, Path], **kwargs) -> Path:
    """
    Write entries as a Gmail filter feed to a file.

    Keyword arguments are passed to entries_to_xml().

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(entries_to_xml(entries, **kwargs), encoding='utf-8')
    logger.info(f"Wrote filters to {path}")
    return path


def parse_xml(xml_content: Union[str, bytes]) -> List[Entry]:
    """
    Parse a Gmail filter feed back into entries.

    Args:
        xml_content: XML document text

    Returns:
        Entries in document order

    Raises:
        ConfigurationError: If the XML is malformed or uses unknown property names
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode('utf-8')

    try:
        root = etree.fromstring(xml_content)
    except etree.XMLSyntaxError as e:
        raise ConfigurationError(f"Invalid filter XML: {e}") from e

    entries = []
    for entry_element in root.xpath('//atom:entry', namespaces=XPATH_NS):
        properties = []
        for element in entry_element.xpath('apps:property', namespaces=XPATH_NS):
            name = element.get('name')
            try:
                prop = Property(PropertyName(name), element.get('value', ''))
            except ValueError as e:
                raise ConfigurationError(f"Invalid filter property {name!r}: {e}") from e
            properties.append(prop)
        entries.append(Entry(properties))
    return entries
