def foo(x):
    return x


foo(1)  # @callers C1 "foo"
