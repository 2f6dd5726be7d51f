"""Small programs shared by the analysis tests."""

from ptaflow.language.builder import ProgramBuilder
from ptaflow.language.types import INT


class Sample(object):
    """Attribute bag holding a World and the parts of it tests look at."""

    def __init__(self, **kwds):
        self.__dict__.update(kwds)


def overrideProgram():
    """
    class A { void m() {} }
    class B extends A { void m() {} }
    class C extends A { void m() {} }
    main: A a = new B(); a.m();
    """
    pb = ProgramBuilder()
    A = pb.newClass("A")
    B = pb.newClass("B", A)
    C = pb.newClass("C", A)
    am = A.method("m")
    bm = B.method("m")
    cm = C.method("m")

    main = pb.newClass("Main").method("main", isStatic=True)
    a = main.var("a", A.jclass)
    alloc = main.new(a, B.jclass)
    call = main.invokeVirtual(A.ref("m"), a)

    world = pb.build(main=main)
    return Sample(
        world=world, A=A.jclass, B=B.jclass, C=C.jclass,
        am=am.method, bm=bm.method, cm=cm.method,
        main=main.method, a=a, alloc=alloc, call=call,
    )


def identityProgram():
    """
    static int id(int p) { return p; }
    main: t = 7; x = id(t); return;
    """
    pb = ProgramBuilder()
    Main = pb.newClass("Main")
    ident = Main.method("id", [INT], INT, isStatic=True, paramNames=["p"])
    ident.ret(ident.param(0))

    main = Main.method("main", isStatic=True)
    t = main.var("t", INT)
    x = main.var("x", INT)
    main.literal(t, 7)
    call = main.invokeStatic(ident, [t], result=x)
    main.ret()

    world = pb.build(main=main)
    return Sample(
        world=world, ident=ident.method, p=ident.param(0),
        main=main.method, t=t, x=x, call=call,
        returnSite=main.method.ir.getStmts()[-1],
    )


def boxProgram():
    """
    class Box { A val; void set(A v) { this.val = v; } A get() { return this.val; } }
    main: b1 = new Box(); b2 = new Box(); a1 = new A(); a2 = new A();
          b1.set(a1); b2.set(a2); r1 = b1.get(); r2 = b2.get();
    """
    pb = ProgramBuilder()
    A = pb.newClass("A")
    Box = pb.newClass("Box")
    val = Box.field("val", A.jclass)

    setter = Box.method("set", [A.jclass], paramNames=["v"])
    setter.storeField(setter.this, val, setter.param(0))

    getter = Box.method("get", (), A.jclass)
    r = getter.var("r", A.jclass)
    getter.loadField(r, getter.this, val)
    getter.ret(r)

    main = pb.newClass("Main").method("main", isStatic=True)
    b1 = main.var("b1", Box.jclass)
    b2 = main.var("b2", Box.jclass)
    a1 = main.var("a1", A.jclass)
    a2 = main.var("a2", A.jclass)
    r1 = main.var("r1", A.jclass)
    r2 = main.var("r2", A.jclass)
    newB1 = main.new(b1, Box.jclass)
    newB2 = main.new(b2, Box.jclass)
    newA1 = main.new(a1, A.jclass)
    newA2 = main.new(a2, A.jclass)
    main.invokeVirtual(setter, b1, [a1])
    main.invokeVirtual(setter, b2, [a2])
    main.invokeVirtual(getter, b1, [], result=r1)
    main.invokeVirtual(getter, b2, [], result=r2)

    world = pb.build(main=main)
    return Sample(
        world=world, val=val, setter=setter.method, getter=getter.method,
        b1=b1, b2=b2, a1=a1, a2=a2, r1=r1, r2=r2,
        newB1=newB1, newB2=newB2, newA1=newA1, newA2=newA2,
    )


def objectAt(result, allocSite):
    """The abstract object of allocSite in a pointer analysis result."""
    for obj in result.getObjects():
        if obj.allocSite is allocSite:
            return obj
    raise KeyError(allocSite)
