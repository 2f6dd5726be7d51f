import unittest
from types import SimpleNamespace

from ptaflow.analysis.pta.context import (
    CallSiteSelector, ContextInsensitiveSelector, ObjectSelector, TypeSelector, makeSelector
)
from ptaflow.application.errors import ConfigurationError


def callSite(context, site):
    return SimpleNamespace(context=context, callSite=site)


def csObj(context, obj):
    return SimpleNamespace(context=context, obj=obj)


class TestMakeSelector(unittest.TestCase):
    def testNames(self):
        self.assertIsInstance(makeSelector("ci"), ContextInsensitiveSelector)

        selector = makeSelector("2-call")
        self.assertIsInstance(selector, CallSiteSelector)
        self.assertEqual((selector.k, selector.hk), (2, 1))

        selector = makeSelector("1-obj")
        self.assertIsInstance(selector, ObjectSelector)
        self.assertEqual((selector.k, selector.hk), (1, 0))

        selector = makeSelector("3-type", heapDepth=2)
        self.assertIsInstance(selector, TypeSelector)
        self.assertEqual((selector.k, selector.hk), (3, 2))

    def testUnknown(self):
        for cs in ("", "obj", "2-cfa", "0-call", "k-obj"):
            self.assertRaises(ConfigurationError, makeSelector, cs)


class TestCallSiteSelector(unittest.TestCase):
    def testTruncation(self):
        selector = makeSelector("2-call")
        empty = selector.emptyContext()
        self.assertEqual(len(empty), 0)

        c1 = selector.selectContext(callSite(empty, "s1"), None, "callee")
        self.assertEqual(c1.elements, ("s1",))

        c2 = selector.selectContext(callSite(c1, "s2"), None, "callee")
        self.assertEqual(c2.elements, ("s1", "s2"))

        c3 = selector.selectContext(callSite(c2, "s3"), None, "callee")
        self.assertEqual(c3.elements, ("s2", "s3"))
        self.assertEqual(len(c3), 2)

    def testInterned(self):
        selector = makeSelector("1-call")
        empty = selector.emptyContext()
        a = selector.selectContext(callSite(empty, "s"), None, "callee")
        b = selector.selectContext(callSite(a, "s"), None, "callee")
        self.assertIs(a, b)

    def testHeapContext(self):
        selector = makeSelector("2-call")
        method = SimpleNamespace(context=selector.makeContext(("s1", "s2"), 2))
        self.assertEqual(selector.selectHeapContext(method, "o").elements, ("s2",))

        selector = makeSelector("1-call")
        method = SimpleNamespace(context=selector.makeContext(("s1",), 1))
        self.assertIs(selector.selectHeapContext(method, "o"), selector.emptyContext())


class TestObjectSelector(unittest.TestCase):
    def testReceiver(self):
        selector = makeSelector("2-obj")
        empty = selector.emptyContext()
        heap = selector.makeContext(("o1",), 1)
        site = callSite(empty, "s")

        context = selector.selectContext(site, csObj(heap, "o2"), "callee")
        self.assertEqual(context.elements, ("o1", "o2"))

        deeper = selector.makeContext(("o0", "o1"), 2)
        context = selector.selectContext(site, csObj(deeper, "o2"), "callee")
        self.assertEqual(context.elements, ("o1", "o2"))

    def testStaticCallKeepsCallerContext(self):
        selector = makeSelector("1-obj")
        caller = selector.makeContext(("o1",), 1)
        self.assertIs(selector.selectContext(callSite(caller, "s"), None, "callee"), caller)


class TestTypeSelector(unittest.TestCase):
    def testContainerType(self):
        selector = makeSelector("1-type")
        obj = SimpleNamespace(getContainerType=lambda: "Factory")
        context = selector.selectContext(
            callSite(selector.emptyContext(), "s"), csObj(selector.emptyContext(), obj), "callee"
        )
        self.assertEqual(context.elements, ("Factory",))


class TestContextInsensitive(unittest.TestCase):
    def testAlwaysEmpty(self):
        selector = makeSelector("ci")
        empty = selector.emptyContext()
        site = callSite(empty, "s")
        self.assertIs(selector.selectContext(site, None, "callee"), empty)
        self.assertIs(selector.selectContext(site, csObj(empty, "o"), "callee"), empty)
        self.assertIs(selector.selectHeapContext(SimpleNamespace(context=empty), "o"), empty)
