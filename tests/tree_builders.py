"""Helpers that build SyntaxNode trees by hand, shaped like parser output."""

from dtsfmt.syntax import SyntaxNode


def joined(children: list[SyntaxNode]) -> str:
    return " ".join(child.text for child in children)


def tok(text: str) -> SyntaxNode:
    """Anonymous token such as `{` or `;`."""
    return SyntaxNode(text, text, is_named=False)


def leaf(type_name: str, text: str) -> SyntaxNode:
    return SyntaxNode(type_name, text)


def ident(text: str) -> SyntaxNode:
    return leaf("identifier", text)


def ref(label: str) -> SyntaxNode:
    return SyntaxNode("reference", f"&{label}", [tok("&"), ident(label)])


def integer(value: str) -> SyntaxNode:
    return leaf("integer_literal", value)


def string(value: str) -> SyntaxNode:
    return leaf("string_literal", f'"{value}"')


def comment(text: str) -> SyntaxNode:
    return leaf("comment", text)


def cells(*items: SyntaxNode) -> SyntaxNode:
    children = [tok("<"), *items, tok(">")]
    return SyntaxNode("integer_cells", joined(children), children)


def binding_cells(source: str) -> SyntaxNode:
    """Integer cells from `&kp A &mt LSHIFT B` style text."""
    items = [ref(word[1:]) if word.startswith("&") else ident(word) for word in source.split()]
    return cells(*items)


def byte_string(*values: str) -> SyntaxNode:
    children = [tok("["), *(leaf("hex", value) for value in values), tok("]")]
    return SyntaxNode("byte_string_literal", joined(children), children)


def prop(name: str, *values: SyntaxNode, label: str | None = None) -> SyntaxNode:
    children = [ident(label), tok(":")] if label else []
    children.append(ident(name))
    for i, value in enumerate(values):
        children.append(tok("=") if i == 0 else tok(","))
        children.append(value)
    children.append(tok(";"))
    return SyntaxNode("property", joined(children), children)


def node(name: str, *members: SyntaxNode, label: str | None = None, address: str | None = None) -> SyntaxNode:
    children = [ident(label), tok(":")] if label else []
    children.append(ref(name[1:]) if name.startswith("&") else ident(name))
    if address is not None:
        children.extend([tok("@"), leaf("unit_address", address)])
    children.extend([tok("{"), *members, tok("}"), tok(";")])
    return SyntaxNode("node", joined(children), children)


def include(path: str) -> SyntaxNode:
    children = [tok("#include"), leaf("system_lib_string", path)]
    return SyntaxNode("preproc_include", joined(children), children)


def define(name: str, value: str | None = None) -> SyntaxNode:
    children = [tok("#define"), ident(name)]
    if value is not None:
        children.append(leaf("preproc_arg", f" {value}"))
    return SyntaxNode("preproc_def", joined(children), children)


def ifdef(name: str, *body: SyntaxNode, keyword: str = "#ifdef") -> SyntaxNode:
    children = [tok(keyword), ident(name), *body, tok("#endif")]
    return SyntaxNode("preproc_ifdef", joined(children), children)


def document(*items: SyntaxNode) -> SyntaxNode:
    return SyntaxNode("document", joined(list(items)), list(items))
