"""
Asset Requirements
==================

Per-request registry of static assets (scripts and stylesheets) that a form
or page needs. Templates pick them up from the context processor as
``requirements_js`` and ``requirements_css``.
"""

from flask import g, has_app_context, url_for
from werkzeug.routing import BuildError


class Requirements:

    @staticmethod
    def _store():
        if not has_app_context():
            return None
        if 'subpage_requirements' not in g:
            g.subpage_requirements = {'javascript': [], 'css': []}
        return g.subpage_requirements

    @staticmethod
    def _add(kind, path):
        store = Requirements._store()
        if store is None:
            return
        if path not in store[kind]:
            store[kind].append(path)

    @staticmethod
    def javascript(path):
        """Declare a script, given as 'blueprint/filename' or an absolute URL"""
        Requirements._add('javascript', path)

    @staticmethod
    def css(path):
        Requirements._add('css', path)

    @staticmethod
    def get(kind):
        store = Requirements._store()
        return list(store[kind]) if store else []

    @staticmethod
    def clear():
        store = Requirements._store()
        if store:
            store['javascript'].clear()
            store['css'].clear()

    @staticmethod
    def resolve(path):
        """
        Turn a declared asset into a URL. 'name/file.js' is served from the
        static folder of the blueprint registered as 'name'.
        """
        if path.startswith(('http://', 'https://', '/')):
            return path
        endpoint, _, filename = path.partition('/')
        if not filename:
            return path
        try:
            return url_for(f'{endpoint}.static', filename=filename)
        except (BuildError, RuntimeError):
            return path

    @staticmethod
    def template_context():
        return {
            'requirements_js': [Requirements.resolve(p) for p in Requirements.get('javascript')],
            'requirements_css': [Requirements.resolve(p) for p in Requirements.get('css')],
        }
