from drf_spectacular.generators import SchemaGenerator


def test_schema_tag_grouping(db):
    generator = SchemaGenerator()
    schema = generator.get_schema(request=None, public=True)
    paths = schema["paths"]

    def tags(path):
        first_op = next(iter(paths[path].values()))
        return first_op.get("tags")

    assert tags("/api/v1/auth/jwt/create/") == ["JWT Authentication"]
    assert tags("/api/v1/auth/register/") == ["Authentication"]
    assert tags("/api/v1/users/") == ["Users"]
    assert tags("/api/v1/users/me/") == ["Profile"]
    assert tags("/api/v1/notifications/") == ["Notifications"]
    assert tags("/api/v1/notifications/calendar/") == ["Calendar"]
    assert tags("/api/v1/messages/") == ["Messages"]
    assert tags("/api/v1/media/{id}/") == ["Media"]
