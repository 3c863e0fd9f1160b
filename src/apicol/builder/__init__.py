"""Collection builder -- turns a normalized document into a collection.

* :mod:`~apicol.builder.environments` -- one environment per server.
* :mod:`~apicol.builder.collection` -- folders by first tag, requests in
  declaration order, skipped-operation bookkeeping.
* :mod:`~apicol.builder.url` -- ``{{BaseUrl}}`` URLs with query strings.
* :mod:`~apicol.builder.body` -- request body selection and synthesis.
"""

from apicol.builder.collection import build_collection, build_request
from apicol.builder.environments import build_environments

__all__ = ["build_collection", "build_environments", "build_request"]
