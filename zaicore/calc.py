import ast
import operator

from .errors import ValidationError

ALLOWED_CHARS = set("0123456789+-*/()., ")

_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}


def _eval_node(node):
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _OPERATORS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        return _OPERATORS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in _OPERATORS:
        return _OPERATORS[type(node.op)](_eval_node(node.operand))
    raise ValidationError("Некорректное выражение")


def evaluate(expr: str) -> int | float:
    text = (expr or "").strip()
    if not text:
        raise ValidationError("Пустое выражение")
    if any(ch not in ALLOWED_CHARS for ch in text):
        raise ValidationError("Выражение содержит недопустимые символы")

    text = text.replace(",", ".")
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError as e:
        raise ValidationError("Некорректное выражение") from e

    try:
        return _eval_node(tree.body)
    except ZeroDivisionError as e:
        raise ValidationError("Деление на ноль") from e


def format_number(value) -> str:
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        text = f"{value:.10f}".rstrip("0").rstrip(".")
        # tiny values would round away to zero
        return text if text not in ("0", "-0") else repr(value)
    return str(value)


def calculate(expr: str) -> str:
    expr = (expr or "").strip()
    return f"{expr} = {format_number(evaluate(expr))}"
