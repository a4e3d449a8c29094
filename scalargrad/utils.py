"""
Visualization utilities for scalargrad computational graphs.

This module provides functions to visualize the computational graph created by
Value objects, showing the flow of data and gradients through operations.
"""

from graphviz import Digraph

from scalargrad.engine import Op, op_label


def trace(root):
    """
    Trace the computational graph starting from a root Value node.

    Collects every Value reachable from root through its operands, together
    with one (operand, result) edge per distinct operand link.

    Args:
        root: A Value object representing the output of a computation

    Returns:
        tuple: (nodes, edges) where:
            - nodes: set of all Value objects in the graph
            - edges: set of (operand, result) tuples

    Example:
        >>> from scalargrad.engine import Value
        >>> x = Value(2.0)
        >>> y = Value(3.0)
        >>> z = x * y + x
        >>> nodes, edges = trace(z)
        >>> len(nodes)  # x, y, x*y and z
        4
    """
    nodes, edges = set(), set()
    stack = [root]
    while stack:
        v = stack.pop()
        if v in nodes:
            continue
        nodes.add(v)
        for child in v._prev:
            edges.add((child, v))
            stack.append(child)
    return nodes, edges


def draw_dot(root, format='svg', rankdir='LR'):
    """
    Visualize the computational graph of a Value object as a directed graph.

    Creates a Graphviz diagram showing:
    - Value nodes with their name, data and gradient
    - Operation nodes (+, *, **k, tanh, exp)
    - Edges showing data flow through the computation

    Args:
        root: A Value object (typically the loss) to visualize from
        format: Output format ('svg', 'png', 'pdf', etc.)
        rankdir: Graph direction - 'LR' (left-right) or 'TB' (top-bottom)

    Returns:
        Digraph: A graphviz Digraph object that can be rendered or displayed

    Example:
        >>> from scalargrad.engine import Value
        >>> x = Value(2.0, name='x')
        >>> y = Value(-3.0, name='y')
        >>> z = x * y
        >>> z.name = 'z'
        >>> z.backward()
        >>> graph = draw_dot(z)
        >>> graph.render('computation_graph')  # Needs the graphviz binaries
    """
    assert rankdir in ['LR', 'TB'], "rankdir must be 'LR' (left-right) or 'TB' (top-bottom)"

    nodes, edges = trace(root)
    dot = Digraph(format=format, graph_attr={'rankdir': rankdir})

    for n in nodes:
        uid = str(id(n))
        label = f'{{ {n.name} | data {n.data:.4f} | grad {n.grad:.4f} }}'
        dot.node(name=uid, label=label, shape='record')

        if n._op is not Op.LEAF:
            op = op_label(n)
            dot.node(name=uid + op, label=op)
            dot.edge(uid + op, uid)

    for n1, n2 in edges:
        # Connect operand (n1) to the operation that produced n2
        dot.edge(str(id(n1)), str(id(n2)) + op_label(n2))

    return dot
