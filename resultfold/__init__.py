"""Fold flat search results into document groups and expand them on demand.

Example
-------
```python
from resultfold import EndpointSettings, FoldingService, Query

client = EndpointSettings(base_url="https://search.example.test").build_client()
service = FoldingService(field="@foldingcollection", endpoint=client, maximum_expanded_results=50)

query = service.prepare_query(Query(keyword_expression="quarterly report"))
results = service.process_results(client.search(query), query)
for top in results.results:
    if top.more_results is not None:
        top.more_results()
```
"""

from .config import FoldingConfig
from .core.models import Query, QueryResults, RangeConstraint, ResultRecord
from .exceptions import ConfigError, FieldNotFoundError, FoldingError, TransportError
from .folding.builder import build_forest, flatten_forest, fold_result
from .services.folding_service import FoldingService
from .settings import EndpointSettings

__all__ = [
    "ConfigError",
    "EndpointSettings",
    "FieldNotFoundError",
    "FoldingConfig",
    "FoldingError",
    "FoldingService",
    "Query",
    "QueryResults",
    "RangeConstraint",
    "ResultRecord",
    "TransportError",
    "build_forest",
    "flatten_forest",
    "fold_result",
]
