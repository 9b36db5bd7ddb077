# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.gamification import GamificationProfile, XPEvent
from models.goal import Goal
from models.milestone import Milestone
from models.habit import Habit
from models.habit_log import HabitLog
from models.task import Task
from models.focus_session import FocusSession
from models.mood_entry import MoodEntry
from models.journal import JournalEntry
from models.habit_stack import HabitStack
from models.goal_template import GoalTemplate
from models.task_list import TaskList
from models.daily_plan import DailyPlan
from models.weekly_review import WeeklyReview
from models.recovery_log import RecoveryLog

__all__ = [
    "User",
    "GamificationProfile",
    "XPEvent",
    "Goal",
    "Milestone",
    "Habit",
    "HabitLog",
    "Task",
    "FocusSession",
    "MoodEntry",
    "JournalEntry",
    "HabitStack",
    "GoalTemplate",
    "TaskList",
    "DailyPlan",
    "WeeklyReview",
    "RecoveryLog",
]
