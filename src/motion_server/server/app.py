"""
Flask application for motion-server.

One parameterized app serves both deployment modes:

- music folder mode (``music_path`` set): request paths are relative to the
  music folder and may not leave it;
- filesystem mode (no ``music_path``): request paths are absolute, as used by
  the desktop shell together with ``/getMounts``.
"""

import os
import re
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from flask import Flask, Response, abort, jsonify, request, send_file, send_from_directory
from markupsafe import escape
from pydantic import ValidationError
from werkzeug.exceptions import Forbidden, NotFound

from .. import SERVER_SIGNATURE
from ..models.config import ServerConfig
from ..models.listing import DirectoryListing, PlaylistEntry
from ..tools.dir_lister import DirectoryLister
from ..tools.media import MediaClassifier
from ..tools.mounts import MountProvider, get_mount_provider
from ..tools.playlist import PlaylistWriter


logger = logging.getLogger(__name__)

NOT_FOUND_BODY = 'Not found!'
FORBIDDEN_BODY = 'Forbidden'
BACKGROUNDS_ROUTE = '/backgrounds'

_DRIVE_RE = re.compile(r'^[A-Za-z]:')
_MUSIC_PREFIX_RE = re.compile(r'^/*music(?:/|$)')


def _text(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype='text/plain')


def is_within(path: str, root: str) -> bool:
    """Check that a normalized path is ``root`` or lies below it."""
    path = os.path.normpath(path)
    root = os.path.normpath(root)
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def render_index(base_url: str, names) -> str:
    """
    Render a bare directory index as an HTML list of links.

    Args:
        base_url: URL of the directory, with trailing slash
        names: Entry names in display order

    Returns:
        HTML fragment
    """
    items = ''.join(
        f'<li><a href="{escape(base_url + quote(name))}">{escape(name)}</a></li>'
        for name in names
    )
    return f'<ul>{items}</ul>'


class MotionServer:
    """
    Binds the filesystem tools to HTTP routes.

    The configuration is fixed at construction; every route reads it from
    ``self.config``.
    """

    def __init__(self, config: ServerConfig, mount_provider: Optional[MountProvider] = None):
        self.config = config
        self.lister = DirectoryLister(show_hidden=config.media.show_hidden)
        self.classifier = MediaClassifier(config.media)
        self.mount_provider = mount_provider or get_mount_provider()
        self.playlist_writer = PlaylistWriter()

        self.app = Flask(__name__, static_folder=None)
        self.app.extensions['motion_server'] = self
        self._configure_error_handlers()
        self._configure_routes()

    # ------------------- path handling -------------------

    def resolve_path(self, raw: str, strip_music_prefix: bool = True) -> str:
        """
        Map a path taken from the URL to a filesystem path.

        Args:
            raw: Decoded path segment from the route
            strip_music_prefix: Drop a leading ``music`` segment, as sent by
                clients that pass their /music URL path

        Returns:
            Normalized filesystem path

        Raises:
            Forbidden: If the path leaves the music folder
        """
        raw = raw.replace('%23', '#').replace('\\', '/')

        if self.config.music_path is None:
            if _DRIVE_RE.match(raw):
                return os.path.normpath(raw)
            return os.path.normpath('/' + raw.lstrip('/'))

        root = self.config.music_path
        relative = _MUSIC_PREFIX_RE.sub('', raw) if strip_music_prefix else raw
        relative = relative.lstrip('/')
        resolved = os.path.normpath(os.path.join(root, relative))
        if not is_within(resolved, root):
            logger.warning(f"Rejected path outside music folder: {raw}")
            raise Forbidden()
        return resolved

    def read_listing(self, directory: str) -> DirectoryListing:
        listing = self.lister.get_dir(directory)
        if listing is None:
            raise NotFound()
        return listing

    # ------------------- routes -------------------

    def _configure_error_handlers(self) -> None:
        app = self.app

        @app.errorhandler(NotFound)
        def not_found(_error):
            return _text(NOT_FOUND_BODY, 404)

        @app.errorhandler(Forbidden)
        def forbidden(_error):
            return _text(FORBIDDEN_BODY, 403)

    def _configure_routes(self) -> None:
        app = self.app
        config = self.config

        @app.route('/serverInfo')
        def server_info():
            return _text(SERVER_SIGNATURE)

        @app.route('/getDir/', defaults={'dir_path': ''})
        @app.route('/getDir/<path:dir_path>')
        def get_dir(dir_path: str):
            listing = self.read_listing(self.resolve_path(dir_path))
            return jsonify(self.classifier.classify(listing).to_dict())

        @app.route('/getCover/', defaults={'dir_path': ''})
        @app.route('/getCover/<path:dir_path>')
        def get_cover(dir_path: str):
            listing = self.read_listing(self.resolve_path(dir_path))
            return _text(self.classifier.find_cover(listing) or '')

        @app.route('/getMounts')
        def get_mounts():
            if config.music_path is not None:
                # the music folder is the only browsable root
                return jsonify(['/'])
            return jsonify(self.mount_provider.list_mounts())

        @app.route('/getHomeDir')
        def get_home_dir():
            if config.music_path is not None:
                return _text('/')
            return _text(str(Path.home()))

        @app.route('/getFile/<path:file_path>')
        def get_file(file_path: str):
            if not self.classifier.is_servable(file_path):
                abort(403)
            path = self.resolve_path(file_path)
            if not os.path.isfile(path):
                abort(404)
            return send_file(path, conditional=True)

        @app.route('/savePlist/<path:plist_path>', methods=['POST', 'PUT'])
        def save_playlist(plist_path: str):
            payload = request.get_json(silent=True) or {}
            try:
                entries = [PlaylistEntry.model_validate(item) for item in payload.get('contents') or []]
            except (ValidationError, TypeError, AttributeError) as e:
                app.logger.warning(f"/savePlist rejected playlist: {e}")
                return jsonify({'error': f"Invalid playlist: {e}"}), 400

            result = self.playlist_writer.save(
                self.resolve_path(plist_path),
                entries,
                overwrite=request.method == 'PUT'
            )
            return jsonify(result.to_dict())

        if config.music_path is not None:
            @app.route('/music/', defaults={'sub_path': ''})
            @app.route('/music/<path:sub_path>')
            def music(sub_path: str):
                path = self.resolve_path(sub_path, strip_music_prefix=False)
                if os.path.isfile(path):
                    if not self.classifier.is_servable(path):
                        abort(403)
                    return send_file(path, conditional=True)
                listing = self.read_listing(path)
                return jsonify(self.classifier.classify(listing).to_dict())

        if config.backgrounds_path is not None:
            @app.route(BACKGROUNDS_ROUTE + '/', defaults={'sub_path': ''})
            @app.route(BACKGROUNDS_ROUTE + '/<path:sub_path>')
            def backgrounds(sub_path: str):
                return self._serve_folder(config.backgrounds_path, sub_path, f"{BACKGROUNDS_ROUTE}/")

        if config.public_path is not None:
            @app.route('/', defaults={'asset': ''})
            @app.route('/<path:asset>')
            def client(asset: str):
                return self._serve_folder(config.public_path, asset, '/')

    def _serve_folder(self, root: str, sub_path: str, mount_url: str):
        """
        Serve a file from ``root``, or an index for a directory.

        Directories containing index.html get that file; others get a plain
        list of links.
        """
        directory = os.path.join(root, sub_path)
        if sub_path and not os.path.isdir(directory):
            return send_from_directory(root, sub_path, conditional=True)

        if not is_within(directory, root):
            abort(403)

        if os.path.isfile(os.path.join(directory, 'index.html')):
            return send_from_directory(directory, 'index.html')

        listing = self.read_listing(directory)
        sub_url = quote(sub_path.strip('/'))
        base_url = mount_url + (sub_url + '/' if sub_url else '')
        return render_index(base_url, listing.dirs + listing.files)


def create_app(config: ServerConfig, mount_provider: Optional[MountProvider] = None) -> Flask:
    """
    Build the Flask application for a configuration.

    Args:
        config: Immutable server configuration
        mount_provider: Mount enumeration strategy; selected for the running
            platform when omitted

    Returns:
        Configured Flask application
    """
    server = MotionServer(config, mount_provider)
    logger.debug(f"Application created: {config}")
    return server.app
