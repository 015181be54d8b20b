"""
Unit tests for the command-line entry point.

The Flask server and the browser are never started: ``Flask.run`` and
``launch_client`` are patched.
"""

import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from motion_server import cli


class TestArgumentParsing:
    """Test cases for flag parsing and override mapping."""

    def test_short_flags(self):
        args = cli.build_arg_parser().parse_args(['-m', '/music', '-p', '9000', '-s', '-e', '-b', '/bg'])
        overrides = cli.overrides_from_args(args)

        assert overrides['music_path'] == '/music'
        assert overrides['port'] == 9000
        assert overrides['launch_client'] is False
        assert overrides['allow_external'] is True
        assert overrides['backgrounds_path'] == '/bg'

    def test_unset_flags_map_to_none(self):
        args = cli.build_arg_parser().parse_args([])
        overrides = cli.overrides_from_args(args)

        assert overrides['port'] is None
        assert overrides['launch_client'] is None
        assert overrides['allow_external'] is None
        assert 'media' not in overrides

    def test_show_hidden(self):
        args = cli.build_arg_parser().parse_args(['--show-hidden'])

        assert cli.overrides_from_args(args)['media'] == {'show_hidden': True}

    def test_invalid_port_type(self):
        with pytest.raises(SystemExit):
            cli.build_arg_parser().parse_args(['-p', 'abc'])


class TestMain:
    """Test cases for main()."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)
        self.music = self.root / "music"
        self.music.mkdir()
        self.public = self.root / "public"
        self.public.mkdir()
        self._discovery = patch(
            'motion_server.config.parser.ConfigParser._find_and_load_config',
            return_value=(None, None)
        )
        self._discovery.start()

    def teardown_method(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)
        self._discovery.stop()

    def test_starts_server(self):
        with patch('flask.Flask.run') as run, \
             patch('motion_server.cli.launch_client') as launch:
            code = cli.main(['-m', str(self.music), '--public', str(self.public), '-p', '9001'])

        assert code == 0
        run.assert_called_once_with(host='localhost', port=9001, debug=False, threaded=True)
        launch.assert_called_once()

    def test_no_browser_without_client_bundle(self):
        with patch('flask.Flask.run') as run, \
             patch('motion_server.cli.launch_client') as launch:
            code = cli.main(['-m', str(self.music)])

        assert code == 0
        run.assert_called_once()
        launch.assert_not_called()

    def test_server_only_and_external(self):
        with patch('flask.Flask.run') as run, \
             patch('motion_server.cli.launch_client') as launch:
            code = cli.main(['-m', str(self.music), '-s', '-e'])

        assert code == 0
        assert run.call_args.kwargs['host'] == '0.0.0.0'
        launch.assert_not_called()

    def test_missing_music_folder(self):
        with patch('flask.Flask.run') as run:
            code = cli.main(['-m', str(self.root / 'missing'), '-s'])

        assert code == 1
        run.assert_not_called()

    def test_prompt_when_music_folder_missing(self):
        with patch('motion_server.cli.prompt_music_path', return_value=str(self.music)) as prompt, \
             patch('flask.Flask.run'):
            code = cli.main(['-s'])

        assert code == 0
        prompt.assert_called_once()

    def test_strict_mode_prompts_before_rejecting(self):
        config_file = self.root / 'motionserver.yaml'
        config_file.write_text(f"public_path: '{self.public}'\n")

        with patch('motion_server.cli.prompt_music_path', return_value=str(self.music)) as prompt, \
             patch('flask.Flask.run') as run:
            code = cli.main(['--strict', '-s', '-c', str(config_file)])

        assert code == 0
        prompt.assert_called_once()
        run.assert_called_once()

    def test_strict_mode_still_rejects_missing_music_folder(self):
        config_file = self.root / 'motionserver.yaml'
        config_file.write_text(f"public_path: '{self.public}'\n")

        with patch('motion_server.cli.prompt_music_path', return_value=None) as prompt, \
             patch('flask.Flask.run') as run:
            code = cli.main(['--strict', '-s', '-c', str(config_file)])

        assert code == 1
        prompt.assert_called_once()
        run.assert_not_called()

    def test_init_config(self):
        target = self.root / 'motionserver.yaml'

        code = cli.main(['--init-config', str(target)])

        assert code == 0
        assert target.read_text().startswith('# motion-server configuration')

    def test_prompt_skipped_without_terminal(self):
        with patch('motion_server.cli.sys.stdin') as stdin:
            stdin.isatty.return_value = False
            assert cli.prompt_music_path() is None

    def test_prompt_defaults_to_home(self):
        with patch('motion_server.cli.sys.stdin') as stdin, \
             patch('builtins.input', return_value=''):
            stdin.isatty.return_value = True
            assert cli.prompt_music_path() == str(Path.home())
