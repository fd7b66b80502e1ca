from mova_agent.app.drivers.policy import is_allowed, is_url_allowed


class TestIsAllowed:
    def test_absent_allowlist_is_permissive(self):
        assert is_allowed("rm", None) is True

    def test_empty_allowlist_is_permissive(self):
        assert is_allowed("anything", []) is True

    def test_deny_by_default_rejects_with_empty_allowlist(self):
        assert is_allowed("node", [], deny_by_default=True) is False
        assert is_allowed("node", None, deny_by_default=True) is False

    def test_deny_by_default_does_not_change_non_empty_allowlist(self):
        assert is_allowed("node", ["node"], deny_by_default=True) is True

    def test_prefix_match(self):
        assert is_allowed("node", ["node"]) is True
        assert is_allowed("nodejs", ["node"]) is True
        assert is_allowed("/usr/bin/git", ["/usr/bin/"]) is True

    def test_not_a_prefix(self):
        assert is_allowed("rm", ["node"]) is False
        assert is_allowed("xnode", ["node"]) is False

    def test_target_is_trimmed(self):
        assert is_allowed("  node  ", ["node"]) is True

    def test_entries_are_not_trimmed(self):
        assert is_allowed("node", [" node"]) is False

    def test_case_sensitive(self):
        assert is_allowed("Node", ["node"]) is False

    def test_no_glob_or_regex(self):
        assert is_allowed("node", ["n*"]) is False
        assert is_allowed("node", ["n.de"]) is False

    def test_any_entry_matches(self):
        assert is_allowed("git", ["node", "git", "git"]) is True

    def test_property_matches_definition(self):
        targets = ["node", " node -v", "git", "", "  ", "rm -rf /", "python3"]
        allowlists = [None, [], ["node"], ["git", "py"], [""], ["rm -rf"]]
        for target in targets:
            for allowlist in allowlists:
                expected = (not allowlist) or any(target.strip().startswith(e) for e in allowlist)
                assert is_allowed(target, allowlist) is expected, (target, allowlist)


class TestIsUrlAllowed:
    def test_empty_allowlist_is_permissive(self):
        assert is_url_allowed("https://example.com/x", []) is True

    def test_same_origin_allowed(self):
        assert is_url_allowed("https://example.com/api/v1?q=1", ["https://example.com"]) is True

    def test_different_host_rejected(self):
        assert is_url_allowed("https://not-allowed.test", ["https://example.com"]) is False

    def test_lookalike_host_rejected(self):
        assert is_url_allowed("https://example.com.evil.test/", ["https://example.com"]) is False

    def test_scheme_must_match(self):
        assert is_url_allowed("http://example.com", ["https://example.com"]) is False

    def test_port_must_match_when_entry_has_port(self):
        assert is_url_allowed("https://example.com:8443/", ["https://example.com:8443"]) is True
        assert is_url_allowed("https://example.com:9000/", ["https://example.com:8443"]) is False

    def test_entry_without_port_allows_any_port(self):
        assert is_url_allowed("https://example.com:8443/", ["https://example.com"]) is True

    def test_entry_path_is_a_prefix(self):
        allowlist = ["https://example.com/hooks"]
        assert is_url_allowed("https://example.com/hooks/abc", allowlist) is True
        assert is_url_allowed("https://example.com/admin", allowlist) is False

    def test_entry_path_matches_whole_segments(self):
        assert is_url_allowed("https://example.com/hooks", ["https://example.com/hooks"]) is True
        assert is_url_allowed("https://example.com/hooksevil", ["https://example.com/hooks"]) is False
        assert is_url_allowed("https://example.com/v10/x", ["https://example.com/v1"]) is False
        assert is_url_allowed("https://example.com/v1/x", ["https://example.com/v1/"]) is True

    def test_unparseable_entries_match_nothing(self):
        assert is_url_allowed("https://example.com", ["node", "::::"]) is False

    def test_relative_url_rejected(self):
        assert is_url_allowed("/just/a/path", ["https://example.com"]) is False

    def test_deny_by_default(self):
        assert is_url_allowed("https://example.com", None, deny_by_default=True) is False
