from drf_spectacular.generators import SchemaGenerator

from config.spectacular_hooks import assign_group_tag


def test_assign_group_tag():
    assert assign_group_tag("/api/auth/attendee/login/") == "Attendee Authentication"
    assert assign_group_tag("/api/export/survey/{survey_id}/pdf/") == "Export"
    assert assign_group_tag("/health/") is None


def test_schema_tag_grouping(db):
    generator = SchemaGenerator()
    schema = generator.get_schema(request=None, public=True)
    paths = schema["paths"]
    expected = {
        "/api/auth/admin/login/": "Admin Authentication",
        "/api/auth/attendee/first-login/": "Attendee Authentication",
        "/api/conferences/": "Conferences",
        "/api/surveys/active/": "Surveys",
        "/api/questions/reorder/": "Questions",
        "/api/responses/attendee/": "Responses",
        "/api/statistics/survey/{survey_id}/": "Statistics",
    }
    for path, tag in expected.items():
        assert path in paths, path
        for operation in paths[path].values():
            assert operation["tags"] == [tag]
