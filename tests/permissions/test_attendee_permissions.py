from rest_framework import status

from tests.permissions.mixins import ROLE_OTHER_ADMIN
from tests.permissions.mixins import ROLE_OWNER
from tests.permissions.mixins import RoleAPITestCase


class AttendeeAdminPermissionTests(RoleAPITestCase):
    def test_attendee_detail_limited_to_owner(self):
        kwargs = {"pk": self.own.attendees[0].pk}
        self.assert_allowed(
            self.get("api:attendees-detail", role=ROLE_OWNER, reverse_kwargs=kwargs),
        )
        self.assert_denied(
            self.get("api:attendees-detail", role=ROLE_OTHER_ADMIN, reverse_kwargs=kwargs),
            status.HTTP_404_NOT_FOUND,
        )

    def test_other_admin_cannot_unlock_or_delete(self):
        kwargs = {"pk": self.own.attendees[0].pk}
        self.assert_denied(
            self.put("api:attendees-unlock", role=ROLE_OTHER_ADMIN, reverse_kwargs=kwargs),
            status.HTTP_404_NOT_FOUND,
        )
        self.assert_denied(
            self.delete("api:attendees-detail", role=ROLE_OTHER_ADMIN, reverse_kwargs=kwargs),
            status.HTTP_404_NOT_FOUND,
        )

    def test_attendee_list_of_unowned_conference_is_404(self):
        response = self.get(
            "api:attendees-by-conference",
            role=ROLE_OTHER_ADMIN,
            reverse_kwargs={"conference_id": self.own.conference.pk},
        )
        self.assert_denied(response, status.HTTP_404_NOT_FOUND)
