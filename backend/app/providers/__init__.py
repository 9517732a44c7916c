"""
Choice-list providers. Importing this package registers the built-in descriptors.
"""

from .registry import all_descriptors, get_descriptor, register_descriptor
from .script_choice import (
    NO_DEFAULT_CHOICE,
    ScriptChoiceListProvider,
    ScriptChoiceListProviderDescriptor,
)

script_choice_descriptor = ScriptChoiceListProviderDescriptor()
register_descriptor(script_choice_descriptor)

__all__ = [
    "NO_DEFAULT_CHOICE",
    "ScriptChoiceListProvider",
    "ScriptChoiceListProviderDescriptor",
    "all_descriptors",
    "get_descriptor",
    "register_descriptor",
    "script_choice_descriptor",
]
