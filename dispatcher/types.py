from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Union

from ..driver.base import ResultHeader

# Type aliases
Row = Dict[str, Any]
RowSequence = List[Row]
StatementResult = Union[ResultHeader, Any]
StatementResults = List[StatementResult]
# what execute resolves to: rows for a read, one result for a single
# mutating statement, the ordered list for a mutating batch
ExecuteResult = Union[RowSequence, StatementResult, StatementResults]
ResultCallback = Callable[[Optional[BaseException], Any], Any]
