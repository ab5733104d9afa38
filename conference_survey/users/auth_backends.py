from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend


class EmailBackend(ModelBackend):
    """Authenticate admins by email, falling back to username for superusers."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        usermodel = get_user_model()
        login = kwargs.get("email") or username
        if not login or password is None:
            return None
        try:
            user = usermodel.objects.get(email__iexact=login)
        except usermodel.DoesNotExist:
            try:
                user = usermodel.objects.get(username__iexact=login)
            except usermodel.DoesNotExist:
                # Run the hasher anyway so timing does not reveal unknown emails.
                usermodel().set_password(password)
                return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user

        return None
