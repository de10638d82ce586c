"""
Tree Serialization - JSON interchange for syntax trees.

External parsers (e.g. a TypeScript compiler host) hand trees to funclint
as JSON documents of this shape:

    {
        "_type": "source_file",
        "filename": "src/app.ts",
        "text": "<full source text>",
        "root": <node>
    }

    <node> = {
        "kind": "method_declaration",     # SyntaxKind value; unknown -> "other"
        "start": 10, "end": 42,           # character offsets into text
        "name": "foo",                    # optional
        "body": {"start": 20, "end": 42}, # optional, function-like kinds
        "children": [<node>, ...],
        "expression": 0,                  # call expressions: index into children
        "arguments": [1, 2]               # call expressions: indices into children
    }

Usage:
    from funclint.syntax.ast_serde import serialize_source_file, deserialize_source_file
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from funclint.errors import SourceParseError
from funclint.syntax.nodes import SourceFile, SyntaxKind, SyntaxNode, TextRange


def _child_position(parent: SyntaxNode, node: SyntaxNode) -> int:
    for i, child in enumerate(parent.children):
        if child is node:
            return i
    raise ValueError(f"{node!r} is not a child of {parent!r}")


def node_to_dict(node: SyntaxNode) -> Dict[str, Any]:
    """Convert a syntax node (and its subtree) to a serializable dict."""
    data: Dict[str, Any] = {
        'kind': node.kind.value,
        'start': node.start,
        'end': node.end,
    }
    if node.name is not None:
        data['name'] = node.name
    if node.body is not None:
        data['body'] = {'start': node.body.start, 'end': node.body.end}
    data['children'] = [node_to_dict(c) for c in node.children]
    if node.expression is not None:
        data['expression'] = _child_position(node, node.expression)
    if node.arguments:
        data['arguments'] = [_child_position(node, a) for a in node.arguments]
    return data


def _require_int(data: Dict[str, Any], key: str, filename: str) -> int:
    value = data.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise SourceParseError(f"node field '{key}' must be an integer, got {value!r}", filename)
    return value


def node_from_dict(data: Dict[str, Any], filename: str = "<unknown>") -> SyntaxNode:
    """Rebuild a syntax node from its dict form."""
    if not isinstance(data, dict):
        raise SourceParseError(f"expected a node object, got {type(data).__name__}", filename)

    raw_children = data.get('children', [])
    if not isinstance(raw_children, list):
        raise SourceParseError("node field 'children' must be a list", filename)
    children = [node_from_dict(c, filename) for c in raw_children]

    body = None
    if data.get('body') is not None:
        raw_body = data['body']
        if not isinstance(raw_body, dict):
            raise SourceParseError("node field 'body' must be an object", filename)
        body = TextRange(_require_int(raw_body, 'start', filename), _require_int(raw_body, 'end', filename))

    def child_at(position: Any) -> SyntaxNode:
        if not isinstance(position, int) or isinstance(position, bool) \
                or not 0 <= position < len(children):
            raise SourceParseError(f"child reference {position!r} out of range", filename)
        return children[position]

    expression = None
    if data.get('expression') is not None:
        expression = child_at(data['expression'])
    raw_arguments = data.get('arguments', [])
    if not isinstance(raw_arguments, list):
        raise SourceParseError("node field 'arguments' must be a list", filename)
    arguments: List[SyntaxNode] = [child_at(p) for p in raw_arguments]

    name = data.get('name')
    return SyntaxNode(
        kind=SyntaxKind.from_name(str(data.get('kind', 'other'))),
        start=_require_int(data, 'start', filename),
        end=_require_int(data, 'end', filename),
        name=str(name) if name is not None else None,
        body=body,
        children=children,
        expression=expression,
        arguments=arguments,
    )


def serialize_source_file(source_file: SourceFile) -> bytes:
    """
    Serialize a SourceFile to JSON bytes.

    Args:
        source_file: Parsed source file

    Returns:
        UTF-8 encoded JSON bytes
    """
    data = {
        '_type': 'source_file',
        'filename': source_file.filename,
        'text': source_file.text,
        'root': node_to_dict(source_file.root),
    }
    return json.dumps(data, separators=(',', ':')).encode('utf-8')


def deserialize_source_file(data: Union[bytes, str], filename: str = "<unknown>") -> SourceFile:
    """
    Deserialize a SourceFile from JSON bytes or string.

    Args:
        data: JSON bytes or string
        filename: Used when the document carries no filename

    Returns:
        SourceFile with a freshly numbered tree
    """
    try:
        if isinstance(data, bytes):
            doc = json.loads(data.decode('utf-8'))
        else:
            doc = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SourceParseError(f"invalid JSON: {e}", filename) from e

    if not isinstance(doc, dict) or doc.get('_type') != 'source_file':
        raise SourceParseError("expected a 'source_file' document", filename)

    doc_filename = doc.get('filename')
    if doc_filename is not None and not isinstance(doc_filename, str):
        raise SourceParseError(f"document field 'filename' must be a string, got {doc_filename!r}", filename)
    filename = doc_filename or filename
    text = doc.get('text')
    if not isinstance(text, str):
        raise SourceParseError("document field 'text' must be a string", filename)

    root = node_from_dict(doc.get('root'), filename)
    return SourceFile(filename=filename, text=text, root=root)


def load_source_file(filepath: Union[str, Path]) -> SourceFile:
    """Load a serialized tree from disk."""
    with open(filepath, 'rb') as f:
        return deserialize_source_file(f.read(), str(filepath))


def is_tree_document(filepath: Union[str, Path]) -> bool:
    """
    Check whether a JSON file is a serialized tree.

    Used when scanning directories, where ordinary JSON files (package.json,
    tsconfig.json) sit next to tree documents. Unreadable files count as
    tree documents so that loading them reports the error.
    """
    try:
        with open(filepath, 'rb') as f:
            doc = json.loads(f.read().decode('utf-8'))
    except OSError:
        return True
    except (UnicodeDecodeError, json.JSONDecodeError):
        return False
    return isinstance(doc, dict) and doc.get('_type') == 'source_file'
