#!/usr/bin/env python3
"""Check for banned Python constructions in bootimage source.

Banned constructions:

    Construction          Reason                            Use instead
    --------------------  --------------------------------  --------------------------
    import shlex          config words are split by         bootimage.core.tokens
    from shlex import     bashlex, in one place             split_words()
    assert statement      stripped under -O, gives no       raise an ArgsError
                          structured error                  subclass
"""

import ast
import os
import sys

BANNED_MODULES = frozenset({"shlex"})


def find_python_files(directory):
    """Find all .py files recursively, skipping caches."""
    result = []
    for root, dirs, files in os.walk(directory):
        if "__pycache__" in dirs:
            dirs.remove("__pycache__")
        result.extend(os.path.join(root, f) for f in files if f.endswith(".py"))
    return sorted(result)


def check_source(source, filename="<source>"):
    """Return (lineno, description) for each banned construction."""
    errors = []
    for node in ast.walk(ast.parse(source, filename)):
        lineno = getattr(node, "lineno", 0)

        if isinstance(node, ast.Import):
            errors.extend(
                (lineno, f"import {alias.name}: banned, use split_words()")
                for alias in node.names
                if alias.name in BANNED_MODULES
            )
        elif isinstance(node, ast.ImportFrom) and node.module in BANNED_MODULES:
            errors.append((lineno, f"from {node.module} import: banned, use split_words()"))
        elif isinstance(node, ast.Assert):
            errors.append((lineno, "assert: banned, raise an ArgsError subclass"))

    return errors


def check_tree(src_dir):
    """Check every file under src_dir. Returns (path, lineno, description) tuples."""
    found = []
    for filepath in find_python_files(src_dir):
        with open(filepath) as f:
            source = f.read()
        found.extend((filepath, lineno, desc) for lineno, desc in check_source(source, filepath))
    return sorted(found)


def main():
    src_dir = sys.argv[1] if len(sys.argv) > 1 else "src"
    if not os.path.isdir(src_dir):
        print(f"Directory not found: {src_dir}")
        sys.exit(1)

    try:
        all_errors = check_tree(src_dir)
    except SyntaxError as e:
        print(f"Syntax error: {e}")
        sys.exit(1)

    if not all_errors:
        sys.exit(0)

    print(f"Found {len(all_errors)} banned construction(s):")
    for filepath, lineno, description in all_errors:
        print(f"  {filepath}:{lineno}: {description}")
    sys.exit(1)


if __name__ == "__main__":
    main()
