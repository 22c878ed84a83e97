def foo(x):
    return x


foo(1)  # @callers C1 "foo"
y = foo(2)  # @describe D1 "foo\\(2\\)"
z = [y]  # @peers P1 "\\[y\\]"
