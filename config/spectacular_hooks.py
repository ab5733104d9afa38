PATTERN_TAGS = [
    (lambda p: p.startswith("/api/auth/admin/"), "Admin Authentication"),
    (lambda p: p.startswith("/api/auth/attendee/"), "Attendee Authentication"),
    (lambda p: p.startswith("/api/conferences/"), "Conferences"),
    (lambda p: p.startswith("/api/surveys/"), "Surveys"),
    (lambda p: p.startswith("/api/questions/"), "Questions"),
    (lambda p: p.startswith("/api/responses/"), "Responses"),
    (lambda p: p.startswith("/api/attendees/"), "Attendees"),
    (lambda p: p.startswith("/api/statistics/"), "Statistics"),
    (lambda p: p.startswith("/api/export/"), "Export"),
    (lambda p: p == "/api/schema/", "Meta"),
]


def assign_group_tag(path: str) -> str | None:
    for pred, name in PATTERN_TAGS:
        if pred(path):
            return name
    return None


def group_tags(result, generator, request, public):
    """Collapse router-derived tags into one tag per API area."""
    for path, operations in result.get("paths", {}).items():
        tag = assign_group_tag(path)
        if tag is None:
            continue
        for op in operations.values():
            op["tags"] = [tag]
    return result
