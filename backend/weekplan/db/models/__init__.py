"""ORM models exposed for metadata discovery."""
from weekplan.db.models.agent_action_log import AgentActionLog
from weekplan.db.models.calendar_event import CalendarEvent
from weekplan.db.models.fitness_sample import FitnessSample
from weekplan.db.models.goal import Goal
from weekplan.db.models.micro_adjustment import MicroAdjustment
from weekplan.db.models.task import Task

__all__ = [
    "AgentActionLog",
    "CalendarEvent",
    "FitnessSample",
    "Goal",
    "MicroAdjustment",
    "Task",
]
