# taskgraph type definitions
# Rev 0.2.0

from __future__ import annotations
from typing import Literal

# Chart item classification
ChartKind = Literal["task", "milestone"]

# Chart item status labels
TaskStatus = Literal["completed", "in-progress", "not-started"]
MilestoneStatus = Literal["completed", "pending"]

# Filter types understood by the Gantt composer
FilterType = Literal["BEHIND_SCHEDULE", "CRITICAL_PATH"]
BEHIND_SCHEDULE: FilterType = "BEHIND_SCHEDULE"
CRITICAL_PATH: FilterType = "CRITICAL_PATH"

# Relation tag on rendered dependency edges
FINISH_TO_START = "finish-to-start"

# Traversal direction over the precedence graph
Direction = Literal["pre", "post"]
