from modules.auth.interfaces import IAuthService
from modules.auth.service import AuthService


class TestAuthInterface:
    def test_interface_methods_exist(self):
        """IAuthService should define validate_token."""
        assert hasattr(IAuthService, "validate_token")

    def test_service_implements_interface(self, container):
        """The container's auth service should satisfy IAuthService."""
        assert isinstance(container.auth, AuthService)
        assert isinstance(container.auth, IAuthService)
