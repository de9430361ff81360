"""
Composition of the question text sent to the model.
"""
from pathlib import Path
from typing import Optional


_LANGUAGE_BY_SUFFIX = {
    '.py': 'python',
    '.pyi': 'python',
    '.js': 'javascript',
    '.mjs': 'javascript',
    '.cjs': 'javascript',
    '.jsx': 'javascriptreact',
    '.ts': 'typescript',
    '.tsx': 'typescriptreact',
    '.go': 'go',
    '.rs': 'rust',
    '.java': 'java',
    '.kt': 'kotlin',
    '.c': 'c',
    '.h': 'c',
    '.cpp': 'cpp',
    '.hpp': 'cpp',
    '.cs': 'csharp',
    '.rb': 'ruby',
    '.php': 'php',
    '.sh': 'shellscript',
    '.sql': 'sql',
    '.html': 'html',
    '.css': 'css',
    '.json': 'json',
    '.yaml': 'yaml',
    '.yml': 'yaml',
    '.toml': 'toml',
    '.md': 'markdown',
}


def compose_question(prompt: str, code: Optional[str] = None) -> str:
    """Pair a prompt with optional code as a single user question."""
    return f"{prompt}: {code}" if code else prompt


def language_for(path: Path) -> str:
    return _LANGUAGE_BY_SUFFIX.get(path.suffix.lower(), 'plaintext')


def code_context(selection: Optional[str], document_text: str, language_id: str) -> str:
    """
    Code to send along with a prompt: the selection when there is one,
    otherwise the whole document with a short description.
    """
    if selection:
        return selection
    return f"This is the {language_id} file I'm working on: \n\n{document_text}"


def file_context(path: Path) -> str:
    """Whole-file code context for `path`."""
    return code_context(None, path.read_text(encoding='utf-8'), language_for(path))
