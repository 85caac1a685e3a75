"""Tree-walking evaluator for Dux programs."""

from dataclasses import dataclass
import logging
import sys
from typing import Dict, List, Tuple

from dux.dux_ast import (
    DuxArrayLiteral, DuxBlockStatement, DuxBooleanLiteral, DuxCallExpression, DuxExpression,
    DuxExpressionStatement, DuxFunctionLiteral, DuxHashLiteral, DuxIdentifier, DuxIfExpression,
    DuxIndexExpression, DuxInfixExpression, DuxIntegerLiteral, DuxLetStatement, DuxNode,
    DuxPrefixExpression, DuxProgram, DuxReturnStatement, DuxStringLiteral
)
from dux.dux_builtins import DuxBuiltinFunctions
from dux.dux_environment import DuxEnvironment
from dux.dux_error import DuxEvalError
from dux.dux_value import (
    NIL, DuxArray, DuxBoolean, DuxBuiltin, DuxErrorValue, DuxFunction, DuxHash, DuxHashable,
    DuxHashKey, DuxHashPair, DuxInteger, DuxNil, DuxReturnValue, DuxString, DuxValue,
    native_bool_to_boolean, wrap_int64
)


# Host frames a single non-tail Dux call can use, and spare frames on top of
# those for nested expressions and the caller's own stack.
FRAMES_PER_CALL = 25
RECURSION_HEADROOM = 1000


@dataclass(frozen=True)
class DuxTailCall:
    """Represents a call in tail position, run by the calling loop instead of a new frame."""
    function: DuxFunction
    arguments: List[DuxValue]


def is_truthy(value: DuxValue) -> bool:
    """
    Apply the Dux truthiness rule.

    Only nil, false and the integer zero are falsy.  Everything else, including
    negative integers, empty strings and empty arrays, is truthy.
    """
    match value:
        case DuxNil():
            return False

        case DuxBoolean(value=flag):
            return flag

        case DuxInteger(value=number):
            return number != 0

        case _:
            return True


def is_signal(value: DuxValue) -> bool:
    """Check whether a value is unwinding the evaluation (a return or an error)."""
    return isinstance(value, (DuxReturnValue, DuxErrorValue))


class DuxEvaluator:
    """
    Evaluates Dux AST nodes against an environment.

    Evaluation never raises for a failing Dux program: failures are DuxErrorValue
    results that are handed straight back up through every enclosing expression,
    statement and call.  A `return` travels the same way as a DuxReturnValue until
    the enclosing function call (or the program) unwraps it.
    """

    def __init__(self, max_depth: int = 100, builtins: Dict[str, DuxBuiltin] | None = None):
        """
        Initialize evaluator.

        Args:
            max_depth: Maximum depth of nested function calls
            builtins: Built-in function table; defaults to the standard built-ins
        """
        self.max_depth = max_depth
        self._logger = logging.getLogger("DuxEvaluator")
        self._call_depth = 0

        if builtins is None:
            builtins = DuxBuiltinFunctions().create_builtin_objects()

        self._builtins = builtins

    def evaluate(self, node: DuxNode, env: DuxEnvironment | None = None) -> DuxValue:
        """
        Evaluate an AST node.

        Args:
            node: The program or node to evaluate
            env: Environment for variable lookups; a fresh global environment if None

        Returns:
            The resulting value, which may be a DuxErrorValue (or a DuxReturnValue
            when a bare `return` is evaluated outside a program or function)

        Raises:
            DuxEvalError: If the node is not a Dux AST node
        """
        if env is None:
            env = DuxEnvironment()

        # Non-tail calls nest host frames, so make room for max_depth of them
        host_limit = sys.getrecursionlimit()
        needed_limit = self.max_depth * FRAMES_PER_CALL + RECURSION_HEADROOM
        if needed_limit > host_limit:
            sys.setrecursionlimit(needed_limit)

        self._call_depth = 0
        try:
            return self._eval(node, env)

        except RecursionError:
            self._logger.debug("Host recursion limit reached while evaluating %s", type(node).__name__)
            return DuxErrorValue("maximum recursion depth exceeded")

        finally:
            if needed_limit > host_limit:
                sys.setrecursionlimit(host_limit)

    def _eval(self, node: DuxNode, env: DuxEnvironment) -> DuxValue:
        match node:
            case DuxProgram():
                return self._eval_program(node, env)

            case DuxBlockStatement():
                return self._eval_block_statement(node, env)

            case DuxExpressionStatement(expression=expression):
                return self._eval(expression, env)

            case DuxLetStatement(name=name, value=value_node):
                value = self._eval(value_node, env)
                if is_signal(value):
                    return value

                env.set(name.value, value)
                return NIL

            case DuxReturnStatement(return_value=return_node):
                value = self._eval(return_node, env)
                if is_signal(value):
                    return value

                return DuxReturnValue(value)

            case DuxIntegerLiteral(value=number):
                return DuxInteger(number)

            case DuxBooleanLiteral(value=flag):
                return native_bool_to_boolean(flag)

            case DuxStringLiteral(value=text):
                return DuxString(text)

            case DuxPrefixExpression(operator=operator, right=right_node):
                right = self._eval(right_node, env)
                if is_signal(right):
                    return right

                return self._eval_prefix_expression(operator, right)

            case DuxInfixExpression(left=left_node, operator=operator, right=right_node):
                left = self._eval(left_node, env)
                if is_signal(left):
                    return left

                right = self._eval(right_node, env)
                if is_signal(right):
                    return right

                return self._eval_infix_expression(operator, left, right)

            case DuxIfExpression():
                return self._eval_if_expression(node, env)

            case DuxIdentifier():
                return self._eval_identifier(node, env)

            case DuxFunctionLiteral(parameters=parameters, body=body):
                return DuxFunction(parameters, body, env)

            case DuxCallExpression():
                return self._eval_call_expression(node, env)

            case DuxArrayLiteral(elements=element_nodes):
                elements = self._eval_expressions(element_nodes, env)
                if isinstance(elements, DuxValue):
                    return elements

                return DuxArray(tuple(elements))

            case DuxHashLiteral():
                return self._eval_hash_literal(node, env)

            case DuxIndexExpression(left=left_node, index=index_node):
                left = self._eval(left_node, env)
                if is_signal(left):
                    return left

                index = self._eval(index_node, env)
                if is_signal(index):
                    return index

                return self._eval_index_expression(left, index)

            case _:
                raise DuxEvalError(
                    message=f"Cannot evaluate node of type {type(node).__name__}",
                    suggestion="Only nodes produced by the Dux parser can be evaluated"
                )

    def _eval_program(self, program: DuxProgram, env: DuxEnvironment) -> DuxValue:
        """Evaluate top-level statements, unwrapping a `return` and stopping at the first error."""
        result: DuxValue = NIL

        for statement in program.statements:
            result = self._eval(statement, env)

            if isinstance(result, DuxReturnValue):
                return result.value

            if isinstance(result, DuxErrorValue):
                return result

        return result

    def _eval_block_statement(self, block: DuxBlockStatement, env: DuxEnvironment) -> DuxValue:
        """
        Evaluate a block's statements in order.

        A return value is passed up still wrapped, so the enclosing function call can
        tell an explicit `return` apart from the value of the last statement.
        """
        result: DuxValue = NIL

        for statement in block.statements:
            result = self._eval(statement, env)

            if is_signal(result):
                return result

        return result

    def _eval_tail_block(self, block: DuxBlockStatement, env: DuxEnvironment) -> DuxValue | DuxTailCall:
        """
        Evaluate a function body (or a branch ending one) with its last call left pending.

        The value of a `return` and of the final expression statement are in tail
        position: a user function call there comes back as a DuxTailCall for the
        enclosing call loop to run.
        """
        result: DuxValue = NIL
        last = len(block.statements) - 1

        for position, statement in enumerate(block.statements):
            match statement:
                case DuxReturnStatement(return_value=return_node):
                    value = self._eval_tail_expression(return_node, env)
                    if isinstance(value, DuxTailCall) or is_signal(value):
                        return value

                    return DuxReturnValue(value)

                case DuxExpressionStatement(expression=expression) if position == last:
                    return self._eval_tail_expression(expression, env)

                case _:
                    result = self._eval(statement, env)

            if is_signal(result):
                return result

        return result

    def _eval_tail_expression(self, expression: DuxExpression, env: DuxEnvironment) -> DuxValue | DuxTailCall:
        match expression:
            case DuxCallExpression():
                return self._eval_call_expression(expression, env, tail=True)

            case DuxIfExpression():
                return self._eval_if_expression(expression, env, tail=True)

        return self._eval(expression, env)

    def _eval_prefix_expression(self, operator: str, right: DuxValue) -> DuxValue:
        if operator == "!":
            return native_bool_to_boolean(not is_truthy(right))

        if operator == "-":
            if not isinstance(right, DuxInteger):
                return DuxErrorValue(f"unknown operator: -{right.type_name()}")

            return DuxInteger(wrap_int64(-right.value))

        return DuxErrorValue(f"unknown operator: {operator}{right.type_name()}")

    def _eval_infix_expression(self, operator: str, left: DuxValue, right: DuxValue) -> DuxValue:
        """
        Evaluate a binary operator.

        Operand type pairs are checked in order: two integers, then any pair involving
        a string together with a string or integer, then the generic equality
        operators, and finally the error cases.
        """
        match (left, right):
            case (DuxInteger(), DuxInteger()):
                return self._eval_integer_infix_expression(operator, left, right)

            case (DuxString(), DuxString() | DuxInteger()) | (DuxInteger(), DuxString()):
                return self._eval_string_infix_expression(operator, left, right)

        if operator == "==":
            return native_bool_to_boolean(left == right)

        if operator == "!=":
            return native_bool_to_boolean(left != right)

        if left.type_name() != right.type_name():
            return DuxErrorValue(f"type mismatch: {left.type_name()} {operator} {right.type_name()}")

        return DuxErrorValue(f"unknown operator: {left.type_name()} {operator} {right.type_name()}")

    def _eval_integer_infix_expression(self, operator: str, left: DuxInteger, right: DuxInteger) -> DuxValue:
        left_val = left.value
        right_val = right.value

        match operator:
            case "+":
                return DuxInteger(wrap_int64(left_val + right_val))

            case "-":
                return DuxInteger(wrap_int64(left_val - right_val))

            case "*":
                return DuxInteger(wrap_int64(left_val * right_val))

            case "/":
                if right_val == 0:
                    return DuxErrorValue("division by zero: it is impossible to divide by zero")

                # Truncate toward zero rather than flooring
                quotient = abs(left_val) // abs(right_val)
                if (left_val < 0) != (right_val < 0):
                    quotient = -quotient

                return DuxInteger(wrap_int64(quotient))

            case "<":
                return native_bool_to_boolean(left_val < right_val)

            case ">":
                return native_bool_to_boolean(left_val > right_val)

            case "==":
                return native_bool_to_boolean(left_val == right_val)

            case "!=":
                return native_bool_to_boolean(left_val != right_val)

        return DuxErrorValue(f"unknown operator: {left.type_name()} {operator} {right.type_name()}")

    def _eval_string_infix_expression(self, operator: str, left: DuxValue, right: DuxValue) -> DuxValue:
        """Evaluate an operator where one operand is a string and the other a string or integer."""
        same_type = left.type_name() == right.type_name()

        if operator == "+" and isinstance(left, DuxString) and isinstance(right, DuxString):
            return DuxString(left.value + right.value)

        if operator == "*" and not same_type:
            if isinstance(left, DuxString) and isinstance(right, DuxInteger):
                text, count = left.value, right.value

            else:
                assert isinstance(left, DuxInteger) and isinstance(right, DuxString)
                text, count = right.value, left.value

            return DuxString(text * max(count, 0))

        if operator == "==":
            return native_bool_to_boolean(left == right)

        if operator == "!=":
            return native_bool_to_boolean(left != right)

        if not same_type:
            return DuxErrorValue(f"type mismatch: {left.type_name()} {operator} {right.type_name()}")

        return DuxErrorValue(f"unknown operator: {left.type_name()} {operator} {right.type_name()}")

    def _eval_if_expression(
        self,
        if_expression: DuxIfExpression,
        env: DuxEnvironment,
        tail: bool = False
    ) -> DuxValue | DuxTailCall:
        condition = self._eval(if_expression.condition, env)
        if is_signal(condition):
            return condition

        branch = if_expression.consequence if is_truthy(condition) else if_expression.alternative
        if branch is None:
            return NIL

        if tail:
            return self._eval_tail_block(branch, env)

        return self._eval_block_statement(branch, env)

    def _eval_identifier(self, identifier: DuxIdentifier, env: DuxEnvironment) -> DuxValue:
        """Resolve a name through the environment chain, then the built-ins."""
        value = env.get(identifier.value)
        if value is not None:
            return value

        builtin = self._builtins.get(identifier.value)
        if builtin is not None:
            return builtin

        return DuxErrorValue(f"identifier not found: {identifier.value}")

    def _eval_expressions(
        self,
        expressions: Tuple[DuxExpression, ...],
        env: DuxEnvironment
    ) -> List[DuxValue] | DuxValue:
        """
        Evaluate expressions left to right.

        Returns:
            The list of values, or the first error (or return signal) encountered
        """
        results: List[DuxValue] = []

        for expression in expressions:
            evaluated = self._eval(expression, env)
            if is_signal(evaluated):
                return evaluated

            results.append(evaluated)

        return results

    def _eval_call_expression(
        self,
        call: DuxCallExpression,
        env: DuxEnvironment,
        tail: bool = False
    ) -> DuxValue | DuxTailCall:
        """
        Evaluate the callee and its arguments left to right, then call it.

        In tail position a user function is not called here; it is handed back as a
        DuxTailCall so the call loop already running can take it over.
        """
        function = self._eval(call.function, env)
        if is_signal(function):
            return function

        args = self._eval_expressions(call.arguments, env)
        if isinstance(args, DuxValue):
            return args

        if tail and isinstance(function, DuxFunction):
            return DuxTailCall(function, args)

        return self._apply_function(function, args)

    def _apply_function(self, function: DuxValue, args: List[DuxValue]) -> DuxValue:
        """
        Call a function value with evaluated arguments.

        User functions run in a loop: when the body finishes with a tail call, that
        call replaces the current one instead of nesting a new host frame.  Every
        call, tail or not, still counts towards max_depth until the outermost one
        returns.
        """
        if isinstance(function, DuxBuiltin):
            return function.native_impl(args)

        if not isinstance(function, DuxFunction):
            return DuxErrorValue(f"not a function: {function.type_name()}")

        depth_at_entry = self._call_depth
        try:
            while True:
                parameters = function.parameters
                if len(args) != len(parameters):
                    return DuxErrorValue(f"wrong number of arguments: want={len(parameters)}, got={len(args)}")

                if self._call_depth >= self.max_depth:
                    return DuxErrorValue(f"maximum recursion depth exceeded ({self.max_depth})")

                extended_env = DuxEnvironment.new_enclosed(function.env)
                for parameter, arg in zip(parameters, args):
                    extended_env.set(parameter.value, arg)

                self._call_depth += 1
                evaluated = self._eval_tail_block(function.body, extended_env)

                if isinstance(evaluated, DuxTailCall):
                    function = evaluated.function
                    args = evaluated.arguments
                    continue

                if isinstance(evaluated, DuxReturnValue):
                    return evaluated.value

                return evaluated

        finally:
            self._call_depth = depth_at_entry

    def _eval_hash_literal(self, hash_literal: DuxHashLiteral, env: DuxEnvironment) -> DuxValue:
        pairs: Dict[DuxHashKey, DuxHashPair] = {}

        for key_node, value_node in hash_literal.pairs:
            key = self._eval(key_node, env)
            if is_signal(key):
                return key

            if not isinstance(key, DuxHashable):
                return DuxErrorValue(f"unusable as hash key: {key.type_name()}")

            value = self._eval(value_node, env)
            if is_signal(value):
                return value

            pairs[key.hash_key()] = DuxHashPair(key, value)

        return DuxHash(pairs)

    def _eval_index_expression(self, left: DuxValue, index: DuxValue) -> DuxValue:
        match (left, index):
            case (DuxArray(elements=elements), DuxInteger(value=position)):
                if 0 <= position < len(elements):
                    return elements[position]

                return NIL

            case (DuxHash(), _):
                if not isinstance(index, DuxHashable):
                    return DuxErrorValue(f"unusable as hash key: {index.type_name()}")

                value = left.get(index.hash_key())
                return value if value is not None else NIL

        return DuxErrorValue(f"index operator not supported: {left.type_name()}")
