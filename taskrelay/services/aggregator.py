"""
TaskRelay Backend — Task Aggregator
====================================

What:  Groups tasks under their owning project, sorts both levels by rank, and
       renders the grouped result as structured JSON or as a markdown document.
Why:   The frontend shows tasks per project. Doing the grouping here means the
       client receives one ready-to-display structure per request.
How:   aggregate() builds a TaskGrouping once; render_json() and
       render_markdown() are independent projections over that same value.
Who:   Called by GET /api/tasks after TodoistService fetches both collections.
When:  Once per request. Pure functions, no I/O.

Ordering:
    Projects and tasks are sorted ascending by `order` with Python's stable
    sort, so equal ranks keep the order the upstream returned them in.

Ungrouped tasks:
    A task whose project_id is missing, or names a project that was not
    fetched, is placed in a trailing "Ungrouped" group (id None). That group is
    only emitted when it has tasks. Every task therefore appears exactly once.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from taskrelay.models.task import Project, Task

UNGROUPED_NAME = "Ungrouped"
EMPTY_PROJECT_PLACEHOLDER = "_No tasks_"


@dataclass
class ProjectGroup:
    """A project and its tasks, already sorted by rank."""

    project: Project
    tasks: List[Task] = field(default_factory=list)


@dataclass
class TaskGrouping:
    """
    Ordered sequence of project groups.

    Groups are kept in project-rank order. Lookups by project id never fail:
    an unknown id yields an empty task list.
    """

    groups: List[ProjectGroup] = field(default_factory=list)

    def tasks_for(self, project_id: Optional[str]) -> List[Task]:
        for group in self.groups:
            if group.project.id == project_id:
                return group.tasks
        return []

    def all_tasks(self) -> List[Task]:
        return [task for group in self.groups for task in group.tasks]

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self):
        return iter(self.groups)


def aggregate(
    tasks: Iterable[Task],
    projects: Iterable[Project],
    exclude_completed: bool = False,
) -> TaskGrouping:
    """
    Group tasks by project and sort both levels by rank.

    Args:
        tasks: Tasks in upstream order.
        projects: Projects in upstream order.
        exclude_completed: Drop tasks whose completion flag is set.

    Returns:
        TaskGrouping with one group per project (including empty ones) and a
        trailing "Ungrouped" group when any task had no known project.
    """
    if exclude_completed:
        tasks = [t for t in tasks if not t.is_completed]

    # A repeated project id keeps only its first listing.
    unique: Dict[Optional[str], Project] = {}
    for project in projects:
        unique.setdefault(project.id, project)

    sorted_projects = sorted(unique.values(), key=lambda p: p.order)
    buckets: Dict[Optional[str], List[Task]] = {p.id: [] for p in sorted_projects}
    ungrouped: List[Task] = []

    for task in tasks:
        bucket = buckets.get(task.project_id) if task.project_id else None
        if bucket is None:
            ungrouped.append(task)
        else:
            bucket.append(task)

    groups = [
        ProjectGroup(project=p, tasks=sorted(buckets[p.id], key=lambda t: t.order))
        for p in sorted_projects
    ]
    if ungrouped:
        groups.append(
            ProjectGroup(
                project=Project(id=None, name=UNGROUPED_NAME),
                tasks=sorted(ungrouped, key=lambda t: t.order),
            )
        )
    return TaskGrouping(groups=groups)


def render_json(grouping: TaskGrouping) -> List[Dict[str, Any]]:
    """
    Project a grouping into plain records.

    Each task is reduced to id, content, completion flag, human-readable due
    string (or None) and project id.
    """
    return [
        {
            "id": group.project.id,
            "name": group.project.name,
            "tasks": [
                {
                    "id": task.id,
                    "content": task.content,
                    "is_completed": task.is_completed,
                    "due": task.due,
                    "project_id": task.project_id,
                }
                for task in group.tasks
            ],
        }
        for group in grouping
    ]


def render_markdown(grouping: TaskGrouping) -> str:
    """
    Render a grouping as a markdown checklist.

    Example:
        ## Errands
        - [ ] Buy milk (Due: tomorrow)
        - [x] Post letter

        ## Someday
        _No tasks_
    """
    sections = []
    for group in grouping:
        lines = [f"## {group.project.name}"]
        if not group.tasks:
            lines.append(EMPTY_PROJECT_PLACEHOLDER)
        for task in group.tasks:
            box = "[x]" if task.is_completed else "[ ]"
            line = f"- {box} {task.content}"
            if task.due:
                line += f" (Due: {task.due})"
            lines.append(line)
        sections.append("\n".join(lines))
    return "\n\n".join(sections) + "\n" if sections else ""
