"""Filesystem workspace the agent reads and writes."""

import logging
import os
import shutil
import tempfile

from config.defaults import DEFAULTS

logger = logging.getLogger(__name__)

# Directories never listed to the model nor copied from a template
IGNORED_DIRS = {"node_modules", ".git", ".next", "dist", "coverage", "out", "__pycache__"}

# Hidden files that are still copied from a template
KEPT_DOTFILES = (".gitignore", ".env.example", ".eslintrc", ".prettierrc")


class FileSystemWorkspace:
    """A project directory rooted at root_dir."""

    def __init__(self, root_dir):
        self.root_dir = os.path.realpath(root_dir)

    def _resolve(self, relative_path):
        full_path = os.path.join(self.root_dir, relative_path)
        resolved = os.path.realpath(full_path)
        if not resolved.startswith(self.root_dir + os.sep):
            raise ValueError(f"Path escapes workspace: {relative_path}")
        return resolved

    def write_file(self, relative_path, content):
        """Replace the file's contents, creating parent dirs as needed."""
        resolved = self._resolve(relative_path)
        os.makedirs(os.path.dirname(resolved), exist_ok=True)
        with open(resolved, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug("Wrote %s (%d chars)", relative_path, len(content))

    def read_file(self, relative_path):
        with open(self._resolve(relative_path), encoding="utf-8") as f:
            return f.read()

    def list_project_files(self):
        """Return sorted workspace-relative paths, skipping build/dependency dirs."""
        files = []
        for dirpath, dirnames, filenames in os.walk(self.root_dir):
            dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
            rel_dir = os.path.relpath(dirpath, self.root_dir)
            for name in filenames:
                rel = name if rel_dir == "." else os.path.join(rel_dir, name)
                files.append(rel.replace(os.sep, "/"))
        return sorted(files)


def _ignore_template_entries(_src, names):
    ignored = []
    for name in names:
        if name in IGNORED_DIRS:
            ignored.append(name)
        elif name.startswith(".") and not name.startswith(KEPT_DOTFILES):
            ignored.append(name)
    return ignored


def prepare_workspace(template_dir=None, prefix=None):
    """Create a fresh temp workspace, optionally seeded from a template project."""
    root = tempfile.mkdtemp(prefix=prefix or DEFAULTS["workspace_prefix"])

    if template_dir:
        if not os.path.isdir(template_dir):
            raise ValueError(f"Template directory does not exist: {template_dir}")
        shutil.copytree(template_dir, root, ignore=_ignore_template_entries, dirs_exist_ok=True)
        logger.info("Copied template %s into %s", template_dir, root)

    return FileSystemWorkspace(root)
