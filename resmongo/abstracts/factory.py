##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Name-based registry and constructor for pluggable resmongo components.

A concrete factory declares what it builds through three class attributes and one
hook:

- `component_base`: every registered class must subclass it
- `entry_point_group`: where third-party packages advertise extra components
- `not_found_error`: the exception raised for an unknown name
- `_register_builtins()`: registers the components shipped with resmongo

Plugins are looked up the first time a name can't be resolved from the built-ins,
and only once per factory.
"""

import logging
from abc import ABC, abstractmethod
from importlib.metadata import entry_points
from typing import Any, Dict, List, Type

from resmongo.exceptions import ResMongoError


LOG = logging.getLogger(__name__)


class BaseFactory(ABC):
    """
    Registry of component classes addressable by name or alias.

    Attributes:
        component_base (Type): Base class every registered component must inherit from.
        entry_point_group (str): Entry point group scanned for plugins.
        not_found_error (Type[Exception]): Raised when a name can't be resolved.

    Methods:
        register: Add a component class under a name and optional aliases.
        list_available: Names of every registered component, plugins included.
        create: Build a component by name or alias.
        get_component_info: Describe a registered component.
    """

    component_base: Type = object
    entry_point_group: str = None
    not_found_error: Type[Exception] = ValueError

    def __init__(self):
        self._components: Dict[str, Type] = {}
        self._aliases: Dict[str, str] = {}
        self._plugins_loaded: bool = False
        self._register_builtins()

    @abstractmethod
    def _register_builtins(self):
        """Register the components that ship with resmongo."""

    def register(self, name: str, component_class: Type, aliases: List[str] = None):
        """
        Add `component_class` under `name` and any `aliases`.

        Args:
            name: Canonical name of the component.
            component_class: The class to build for that name.
            aliases: Alternative names resolving to `name`.

        Raises:
            TypeError: If `component_class` is not a subclass of `component_base`.
        """
        if not isinstance(component_class, type) or not issubclass(component_class, self.component_base):
            raise TypeError(f"{component_class} must inherit from {self.component_base.__name__}")

        self._components[name] = component_class
        for alias in aliases or []:
            self._aliases[alias] = name
        LOG.debug(f"Registered '{name}' ({component_class.__name__}) with aliases {aliases or []}.")

    def _load_plugins(self):
        """
        Register every component advertised under `entry_point_group`.

        Built-in names are never replaced. A plugin that can't be loaded or doesn't
        pass validation is logged and skipped.
        """
        if self._plugins_loaded or self.entry_point_group is None:
            return
        self._plugins_loaded = True

        for entry_point in entry_points(group=self.entry_point_group):
            if entry_point.name in self._components:
                continue
            try:
                self.register(entry_point.name, entry_point.load())
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOG.warning(f"Skipping plugin '{entry_point.name}' from '{self.entry_point_group}': {exc}")

    def list_available(self) -> List[str]:
        """
        Return the canonical names of every available component.

        Returns:
            Built-in names followed by plugin names.
        """
        self._load_plugins()
        return list(self._components)

    def _resolve(self, name: str) -> Type:
        """
        Find the class registered for `name`, loading plugins if needed.

        Args:
            name: A canonical name or an alias.

        Returns:
            The registered class.

        Raises:
            not_found_error: If nothing is registered under `name`.
        """
        canonical = self._aliases.get(name, name)
        if canonical not in self._components:
            self._load_plugins()
        if canonical not in self._components:
            raise self.not_found_error(
                f"Component '{name}' is not supported. Available components: {', '.join(self._components)}"
            )
        return self._components[canonical]

    def create(self, name: str, config: Dict[str, Any] = None) -> Any:
        """
        Build the component registered under `name`.

        Args:
            name: A canonical name or an alias.
            config: Keyword arguments for the component's constructor.

        Returns:
            The new component.

        Raises:
            not_found_error: If nothing is registered under `name`.
            ResMongoError: Raised by the component itself, passed through unchanged.
            ValueError: If the constructor fails with any other error.
        """
        component_class = self._resolve(name)
        try:
            component = component_class(**(config or {}))
        except ResMongoError:
            raise
        except Exception as exc:
            raise ValueError(f"Failed to create component '{name}': {exc}") from exc

        LOG.debug(f"Created {component_class.__name__} for '{name}'.")
        return component

    def get_component_info(self, name: str) -> Dict[str, str]:
        """
        Describe the component registered under `name`.

        Args:
            name: A canonical name or an alias.

        Returns:
            The canonical name, class name, module and docstring of the component.
        """
        component_class = self._resolve(name)
        return {
            "name": self._aliases.get(name, name),
            "class": component_class.__name__,
            "module": component_class.__module__,
            "description": component_class.__doc__ or "No description available",
        }
