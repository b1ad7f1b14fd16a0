"""
Resource catalog.
Bookable units of the club (field halves, mini-field, lockers, minibus).
"""

RESOURCE_KINDS = ('FIELD_HALF', 'MINI_FIELD', 'LOCKER', 'VEHICLE')


# =============================================================================
# KIND PREDICATES
# =============================================================================

def is_field_half(resource: dict) -> bool:
    return resource['kind'] == 'FIELD_HALF'


def is_mini_field(resource: dict) -> bool:
    return resource['kind'] == 'MINI_FIELD'


def is_locker(resource: dict) -> bool:
    return resource['kind'] == 'LOCKER'


def is_vehicle(resource: dict) -> bool:
    return resource['kind'] == 'VEHICLE'


def is_field(resource: dict) -> bool:
    """Field-like resources are the ones shown on the week board."""
    return resource['kind'] in ('FIELD_HALF', 'MINI_FIELD')


# =============================================================================
# CATALOG
# =============================================================================

class ResourceCatalog:
    """
    Lookup view over a resource list.

    The two full-field halves are found by name; together they form the
    "full field" allocation.
    """

    def __init__(self, resources: list, half_a_name: str = 'Campo A',
                 half_b_name: str = 'Campo B'):
        self.resources = list(resources)
        self.half_a_name = half_a_name
        self.half_b_name = half_b_name
        self._by_id = {r['id']: r for r in self.resources}

    def __iter__(self):
        return iter(self.resources)

    def __len__(self):
        return len(self.resources)

    def by_id(self, resource_id):
        return self._by_id.get(resource_id)

    def _half(self, name):
        for resource in self.resources:
            if resource['name'] == name and is_field_half(resource):
                return resource
        return None

    @property
    def half_a(self):
        return self._half(self.half_a_name)

    @property
    def half_b(self):
        return self._half(self.half_b_name)

    @property
    def half_a_id(self):
        half = self.half_a
        return half['id'] if half else None

    @property
    def half_b_id(self):
        half = self.half_b
        return half['id'] if half else None

    def is_half_a(self, resource: dict) -> bool:
        return resource['name'] == self.half_a_name and is_field_half(resource)

    def is_half_b(self, resource: dict) -> bool:
        return resource['name'] == self.half_b_name and is_field_half(resource)

    def lockers(self) -> list:
        return [r for r in self.resources if is_locker(r)]

    def fields(self) -> list:
        return [r for r in self.resources if is_field(r)]

