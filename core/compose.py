from functools import reduce


def identity(x):
    return x


def pipe(*funcs):
    """pipe(f, g, h)(x) == h(g(f(x))); pipe() is identity"""
    return reduce(lambda f, g: lambda x: g(f(x)), funcs, identity)
