"""Pre-configured search configs for the record-management tables."""

from tablesearch.schema.table import (
    AggregateDefinition,
    FieldDefinition,
    JoinDefinition,
    TableConfig,
)
from tablesearch.schema.types import FieldType, JoinKind, SortPath

_USER_LOOKUP_COLUMNS = ("username", "user_abbreviation")

DIVISIONS_CONFIG = TableConfig(
    table_name="divisions",
    primary_key="division_id",
    default_sort_field="created_at",
    select_columns=(
        "division_id",
        "name",
        "abbreviation",
        "status",
        "created_at",
        "manager_user_id",
        "created_by",
    ),
    joins=(
        JoinDefinition(
            table="users",
            alias="manager",
            join_condition="divisions.manager_user_id = manager.user_id",
            join_kind=JoinKind.LEFT,
            select_columns=("user_id", "username", "user_abbreviation", "avatar_url"),
        ),
        JoinDefinition(
            table="users",
            alias="creator",
            join_condition="divisions.created_by = creator.user_id",
            join_kind=JoinKind.LEFT,
            select_columns=("user_id", "username", "user_abbreviation"),
        ),
    ),
    aggregates=(
        AggregateDefinition(name="total_users", table="users", foreign_column="division_id"),
    ),
    sort_paths={
        "total_users": SortPath.MATERIALIZE,
        # Divisions without a manager must sort after all managed ones
        "manager.username": SortPath.MATERIALIZE,
        "creator.username": SortPath.MATERIALIZE,
    },
    search_fields=(
        FieldDefinition(name="name", type=FieldType.TEXT, label="Division Name"),
        FieldDefinition(name="abbreviation", type=FieldType.TEXT, label="Abbreviation"),
        FieldDefinition(
            name="status",
            type=FieldType.STATUS,
            label="Status",
            enum_values=("Active", "Inactive"),
            exact_match_keywords=("active", "inactive"),
        ),
        FieldDefinition(
            name="created_by",
            type=FieldType.FOREIGN_KEY,
            label="Created By",
            foreign_table="users",
            foreign_key_column="user_id",
            search_columns=_USER_LOOKUP_COLUMNS,
        ),
        FieldDefinition(
            name="manager_user_id",
            type=FieldType.FOREIGN_KEY,
            label="Manager",
            foreign_table="users",
            foreign_key_column="user_id",
            search_columns=_USER_LOOKUP_COLUMNS,
        ),
        FieldDefinition(
            name="created_at",
            type=FieldType.DATE,
            label="Creation Date",
            date_formats=("MM/DD/YYYY", "YYYY-MM-DD", "MMM", "MMMM"),
        ),
    ),
)

USERS_CONFIG = TableConfig(
    table_name="users",
    primary_key="user_id",
    default_sort_field="created_at",
    select_columns=("user_id", "username", "email", "status", "role", "created_at", "division_id"),
    joins=(
        JoinDefinition(
            table="divisions",
            alias="division",
            join_condition="users.division_id = division.division_id",
            select_columns=("division_id", "name", "abbreviation"),
        ),
    ),
    search_fields=(
        FieldDefinition(name="username", type=FieldType.TEXT, label="Username"),
        FieldDefinition(name="email", type=FieldType.TEXT, label="Email"),
        FieldDefinition(
            name="status",
            type=FieldType.STATUS,
            enum_values=("Active", "Inactive", "Suspended"),
        ),
        FieldDefinition(name="role", type=FieldType.TEXT, label="Role"),
        FieldDefinition(
            name="division_id",
            type=FieldType.FOREIGN_KEY,
            foreign_table="divisions",
            foreign_key_column="division_id",
            search_columns=("name", "abbreviation"),
        ),
        FieldDefinition(name="created_at", type=FieldType.DATE, label="Join Date"),
    ),
)

PROJECTS_CONFIG = TableConfig(
    table_name="projects",
    primary_key="project_id",
    default_sort_field="created_at",
    select_columns=(
        "project_id",
        "name",
        "description",
        "status",
        "priority",
        "created_at",
        "assigned_to",
        "budget",
    ),
    joins=(
        JoinDefinition(
            table="users",
            alias="assignee",
            join_condition="projects.assigned_to = assignee.user_id",
            select_columns=("user_id", "username", "avatar_url"),
        ),
    ),
    search_fields=(
        FieldDefinition(name="name", type=FieldType.TEXT, label="Project Name"),
        FieldDefinition(name="description", type=FieldType.TEXT, label="Description"),
        FieldDefinition(
            name="status",
            type=FieldType.STATUS,
            enum_values=("Planning", "In Progress", "Completed", "On Hold", "Cancelled"),
        ),
        FieldDefinition(
            name="priority",
            type=FieldType.STATUS,
            enum_values=("Low", "Medium", "High", "Urgent"),
        ),
        FieldDefinition(
            name="assigned_to",
            type=FieldType.FOREIGN_KEY,
            foreign_table="users",
            foreign_key_column="user_id",
            search_columns=("username",),
        ),
        FieldDefinition(name="budget", type=FieldType.NUMBER, label="Budget"),
        FieldDefinition(name="created_at", type=FieldType.DATE, label="Creation Date"),
    ),
)

PRESET_CONFIGS: dict[str, TableConfig] = {
    config.table_name: config for config in (DIVISIONS_CONFIG, USERS_CONFIG, PROJECTS_CONFIG)
}
