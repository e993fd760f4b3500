"""Shared fixtures for globals_guard tests."""

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from globals_guard.runner import FileScanner
from globals_guard.sniffs import Diagnostic, create_global_override_sniff
from globals_guard.tokens import PHPTokenizer, TokenKind, TokenStream

# ============================================================================
# Path Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)

# ============================================================================
# Tokenizer Fixtures
# ============================================================================

@pytest.fixture
def tokenizer() -> PHPTokenizer:
    return PHPTokenizer()


@pytest.fixture
def tokenize(tokenizer: PHPTokenizer) -> Callable[[str], TokenStream]:
    """Tokenize a PHP snippet; the `<?php` tag is added when missing."""

    def _tokenize(code: str) -> TokenStream:
        if not code.lstrip().startswith("<?php"):
            code = "<?php\n" + code
        return tokenizer.tokenize(code)

    return _tokenize


def _find_token(stream: TokenStream, kind: TokenKind, text: str | None = None, nth: int = 0) -> int:
    """Position of the nth token of a kind (and optionally text)."""
    matches = [
        token.position
        for token in stream
        if token.kind is kind and (text is None or token.text == text)
    ]
    assert len(matches) > nth, f"no {kind} {text!r} #{nth} in stream"
    return matches[nth]


@pytest.fixture
def find_token() -> Callable[..., int]:
    return _find_token

# ============================================================================
# Sniff Fixtures
# ============================================================================

@pytest.fixture
def sniff():
    return create_global_override_sniff()


@pytest.fixture
def scan(tokenize, sniff) -> Callable[[str], list[Diagnostic]]:
    """Run the override sniff over a PHP snippet and return its diagnostics."""
    scanner = FileScanner([sniff])

    def _scan(code: str) -> list[Diagnostic]:
        return scanner.scan(tokenize(code))

    return _scan

# ============================================================================
# Sample Code Fixtures - PHP
# ============================================================================

@pytest.fixture
def sample_plugin_code() -> str:
    """A plugin file with a mix of allowed and prohibited global usage."""
    return '''<?php
/**
 * Plugin Name: Sample
 */

namespace Sample\\Plugin;

function sample_setup() {
    global $wpdb, $sample_option;

    $table = $wpdb->prefix . 'sample';
    $sample_option = get_option( 'sample' );

    $wpdb = new \\Sample\\DB();
}

function sample_loop( $items ) {
    global $post;

    foreach ( $items as $post ) {
        setup_postdata( $post );
    }
    wp_reset_postdata();
}

$GLOBALS['wp_query'] = new \\WP_Query();
$GLOBALS['sample_cache'] = array();
'''


@pytest.fixture
def sample_plugin_file(temp_dir: Path, sample_plugin_code: str) -> Path:
    file_path = temp_dir / "sample.php"
    file_path.write_text(sample_plugin_code)
    return file_path


@pytest.fixture
def sample_project(temp_dir: Path, sample_plugin_code: str) -> Path:
    """A small plugin directory with a vendor folder that must be ignored."""
    (temp_dir / "includes").mkdir()
    (temp_dir / "vendor" / "lib").mkdir(parents=True)

    (temp_dir / "sample.php").write_text(sample_plugin_code)
    (temp_dir / "includes" / "clean.php").write_text('''<?php
function clean() {
    global $wpdb;
    return $wpdb->get_var( 'SELECT 1' );
}
''')
    (temp_dir / "includes" / "legacy.inc").write_text('''<?php
$GLOBALS['post'] = null;
''')
    (temp_dir / "includes" / "readme.txt").write_text("$GLOBALS['wpdb'] = 1;")
    (temp_dir / "vendor" / "lib" / "bad.php").write_text('''<?php
$GLOBALS['wpdb'] = null;
''')
    return temp_dir

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config_yaml(temp_dir: Path) -> Path:
    """Create a sample configuration YAML file."""
    config_content = '''
sniff:
  custom_test_classes:
    - My\\Tests\\BaseCase
  extra_reserved_globals:
    - my_plugin_registry
  ignore_annotations: false

scan:
  include_patterns:
    - "**/*.php"
  parallel_workers: 2

log_level: "DEBUG"
'''
    config_path = temp_dir / "config.yaml"
    config_path.write_text(config_content)
    return config_path
