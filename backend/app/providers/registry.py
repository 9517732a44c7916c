"""Registry of choice-list provider descriptors, keyed by descriptor id."""

import logging

from .base import ChoiceListProviderDescriptor

_log = logging.getLogger(__name__)

_descriptors: dict[str, ChoiceListProviderDescriptor] = {}


def register_descriptor(descriptor: ChoiceListProviderDescriptor) -> None:
    if descriptor.id in _descriptors:
        raise ValueError(f"Descriptor already registered: {descriptor.id}")
    _descriptors[descriptor.id] = descriptor
    _log.debug("Registered choice provider %s", descriptor.id)


def get_descriptor(descriptor_id: str) -> ChoiceListProviderDescriptor | None:
    return _descriptors.get(descriptor_id)


def all_descriptors() -> list[ChoiceListProviderDescriptor]:
    return list(_descriptors.values())
