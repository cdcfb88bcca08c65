import pytest

from app.utils.avatar import avatar_initial, is_generic_placeholder, resolve_avatar

TEMPLATE = "https://placehold.co/50x50/695cfe/ffffff?text={initial}"


class TestAvatarResolution:
    """프로필 이미지 placeholder 테스트"""

    @pytest.mark.parametrize("avatar_url,display_name,expected", [
        (None, "alice", "https://placehold.co/50x50/695cfe/ffffff?text=A"),
        ("", "Bob", "https://placehold.co/50x50/695cfe/ffffff?text=B"),
        ("https://placehold.co/50x50?text=U", "zoe", "https://placehold.co/50x50/695cfe/ffffff?text=Z"),
        (None, "", "https://placehold.co/50x50/695cfe/ffffff?text=U"),
        (None, None, "https://placehold.co/50x50/695cfe/ffffff?text=U"),
        (None, "   ", "https://placehold.co/50x50/695cfe/ffffff?text=U"),
        (None, "éclair", "https://placehold.co/50x50/695cfe/ffffff?text=É"),
        ("https://cdn.example.com/a.png", "alice", "https://cdn.example.com/a.png"),
        ("https://placehold.co/50x50?text=K", "alice", "https://placehold.co/50x50?text=K"),
    ])
    def test_resolve_avatar(self, avatar_url, display_name, expected):
        assert resolve_avatar(avatar_url, display_name, TEMPLATE) == expected

    def test_uses_configured_template_by_default(self):
        assert resolve_avatar(None, "kim") == "https://placehold.co/50x50/695cfe/ffffff?text=K"

    def test_generic_placeholder_needs_host_and_text(self):
        assert is_generic_placeholder("https://placehold.co/40x40?text=U")
        assert not is_generic_placeholder("https://example.com/?text=U")
        assert not is_generic_placeholder(None)

    def test_avatar_initial_strips_whitespace(self):
        assert avatar_initial("  mina") == "M"
