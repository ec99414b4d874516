##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Merlin
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Merlin.
##############################################################################

"""
Engine selection by name.

`MongoEngine` is registered as `mongodb` (alias `mongo`). Other packages can add
engines by advertising a `ResourceEngine` subclass under the `resmongo.engines`
entry point group:

```toml
[project.entry-points."resmongo.engines"]
couchdb = "resmongo_couch:CouchEngine"
```
"""

from resmongo.abstracts import BaseFactory
from resmongo.backends.engine_base import ResourceEngine
from resmongo.backends.mongo_engine import MongoEngine
from resmongo.exceptions import EngineNotSupportedError


class EngineFactory(BaseFactory):
    """
    Builds storage engines by name.

    Example:
        ```python
        books = engine_factory.create("mongo", {"collection": "books", "uri": "localhost/inventory"})
        ```
    """

    component_base = ResourceEngine
    entry_point_group = "resmongo.engines"
    not_found_error = EngineNotSupportedError

    def _register_builtins(self):
        self.register("mongodb", MongoEngine, aliases=["mongo"])


engine_factory = EngineFactory()
