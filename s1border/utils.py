from s1border.errors import ValidationError
from s1border.metadata import MetadataElement


def find_DOM_element(node, tags):
    ''' First element reached by descending through tag names, e.g. ['safe:platform', 'safe:number'] '''
    for tag in tags:
        found = node.getElementsByTagName(tag)
        if not found:
            raise ValidationError('Element <%s> not found in XML document' % tag)
        node = found[0]
    return node

def get_DOM_text(node, tags):
    ''' Text content of the element at tags without surrounding whitespace '''
    element = find_DOM_element(node, tags)
    return ''.join(child.data for child in element.childNodes
                   if child.nodeType == child.TEXT_NODE).strip()

def get_DOM_attribute(node, tags, name):
    ''' Attribute of the element at tags, empty string if it is not set '''
    return find_DOM_element(node, tags).getAttribute(name)

def element_from_xml(tag, name=None):
    """ Convert BeautifulSoup tag into MetadataElement

    XML attributes and child tags without children become attributes,
    child tags with children become elements.

    """
    element = MetadataElement(name or tag.name, attributes=dict(tag.attrs))
    for child in tag.find_all(True, recursive=False):
        if child.find(True) is None:
            if not element.has_attribute(child.name):
                element.set_attribute(child.name, child.text)
        else:
            element.add_element(element_from_xml(child))
    return element
