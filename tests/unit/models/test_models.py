"""
Unit tests for the SQLAlchemy models.

Why: The schema carries the duplicate-suppression key and the cascade rules
     that keep versions and trackers consistent with their projects
What: Tests table layout, constraints, foreign key behavior and the Project
      helpers
How: Inspects Base.metadata and builds transient model instances
"""

import uuid

from release_tracker.models import (
    Base,
    Notification,
    NotificationType,
    Project,
    User,
    Version,
    project_trackers,
)


class TestSchema:
    """Test table definitions."""

    def test_tables_registered(self) -> None:
        """Test every table is part of the shared metadata."""
        assert set(Base.metadata.tables) == {
            "users",
            "projects",
            "project_trackers",
            "versions",
            "notifications",
        }

    def test_version_tag_unique_per_project(self) -> None:
        """
        Why: Tag name is the de-duplication key within a project
        What: Tests the (project_id, tag_name) unique constraint exists
        How: Looks up the named constraint on the versions table
        """
        constraints = {
            constraint.name: tuple(column.name for column in constraint.columns)
            for constraint in Version.__table__.constraints
            if constraint.name
        }

        assert constraints["uq_version_project_tag"] == ("project_id", "tag_name")

    def test_full_name_unique(self) -> None:
        """Test a repository can only be tracked as one project."""
        assert Project.__table__.c.full_name.unique

    def test_cascade_rules(self) -> None:
        """Test deleting a project removes versions and trackers, not notifications."""
        version_fk = next(iter(Version.__table__.c.project_id.foreign_keys))
        notification_fk = next(iter(Notification.__table__.c.project_id.foreign_keys))
        tracker_fks = {
            fk.parent.name: fk.ondelete for fk in project_trackers.foreign_keys
        }

        assert version_fk.ondelete == "CASCADE"
        assert notification_fk.ondelete == "SET NULL"
        assert tracker_fks == {"user_id": "CASCADE", "project_id": "CASCADE"}

    def test_notification_type_enum_values(self) -> None:
        """Test the database enum stores the lowercase values."""
        column_type = Notification.__table__.c.type.type

        assert column_type.name == "notification_type"
        assert list(column_type.enums) == ["new_release", "update", "error"]


class TestProject:
    """Test Project helpers."""

    def test_owner(self) -> None:
        """Test the owner is the part before the slash."""
        assert Project(name="widget", full_name="acme/widget").owner == "acme"

    def test_tracker_ids(self) -> None:
        """Test tracker ids follow the loaded trackers."""
        users = [User(id=uuid.uuid4(), email=f"{i}@example.com") for i in range(2)]
        project = Project(name="widget", full_name="acme/widget", tracked_by=users)

        assert project.tracker_ids == [user.id for user in users]

    def test_apply_counts(self) -> None:
        """Test counters are replaced and the check time stamped."""
        project = Project(name="widget", full_name="acme/widget")

        project.apply_counts(5, 2, 7)

        assert (project.stars, project.forks, project.watchers) == (5, 2, 7)
        assert project.last_checked.tzinfo is not None

    def test_repr(self) -> None:
        """Test representations name the natural keys."""
        project_id = uuid.uuid4()
        project = Project(id=project_id, name="widget", full_name="acme/widget")
        notification = Notification(
            id=project_id, user_id=project_id, type=NotificationType.ERROR
        )

        assert repr(project) == f"<Project(id={project_id}, full_name=acme/widget)>"
        assert "type=" in repr(notification)
        assert repr(Version(tag_name="v1")).endswith("tag_name=v1)>")
