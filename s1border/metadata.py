""" Hierarchical product metadata with typed attribute lookup """

# abstracted metadata keys
MISSION = 'MISSION'
PRODUCT = 'PRODUCT'
PRODUCT_TYPE = 'PRODUCT_TYPE'
ACQUISITION_MODE = 'ACQUISITION_MODE'
PROCESSING_SYSTEM_IDENTIFIER = 'Processing_system_identifier'
ABS_CALIBRATION_FLAG = 'abs_calibration_flag'
NUM_OUTPUT_LINES = 'num_output_lines'
NUM_SAMPLES_PER_LINE = 'num_samples_per_line'

TRUE_STRINGS = ('true', '1')


class _Missing(object):
    def __repr__(self):
        return 'MISSING'

    def __bool__(self):
        return False

MISSING = _Missing()


class MetadataElement(object):
    """ Named node of a metadata tree

    Attributes are plain key/value pairs (values are usually strings as read
    from XML), elements are the ordered child nodes. Several children may
    share the same name (e.g. one element per annotation file).

    """
    def __init__(self, name, attributes=None, elements=None):
        self.name = name
        self.attributes = dict(attributes or {})
        self.elements = list(elements or [])

    def __repr__(self):
        return 'MetadataElement(%r, %d attributes, %d elements)' % (
            self.name, len(self.attributes), len(self.elements))

    def add_element(self, element):
        self.elements.append(element)
        return element

    def get_element(self, name):
        ''' First child element with given name or None '''
        for element in self.elements:
            if element.name == name:
                return element
        return None

    def get_elements(self):
        return list(self.elements)

    def get_element_path(self, names):
        ''' Walk down the tree along <names>, None if any node is absent '''
        element = self
        for name in names:
            element = element.get_element(name)
            if element is None:
                return None
        return element

    def set_attribute(self, name, value):
        self.attributes[name] = value

    def has_attribute(self, name):
        return name in self.attributes

    def get_attribute_string(self, name, default=MISSING):
        value = self.attributes.get(name, MISSING)
        if value is MISSING:
            return default
        return str(value).strip()

    def get_attribute_int(self, name, default=MISSING):
        value = self.attributes.get(name, MISSING)
        if value is MISSING:
            return default
        return int(value)

    def get_attribute_bool(self, name, default=MISSING):
        value = self.attributes.get(name, MISSING)
        if value is MISSING:
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in TRUE_STRINGS
