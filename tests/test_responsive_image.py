import sys
import unittest
from pathlib import Path

# Ensure `src/` layout is importable when running tests without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
sys.path.insert(0, str(SRC_DIR))


def _fake_image(methods=("ScaleWidth", "Fill")):
    from responsiveimages.capabilities import ImageResource

    class FakeImage(ImageResource):
        def __init__(self) -> None:
            self.calls = []

        def has_capability(self, method: str) -> bool:
            return method in methods

        def resample(self, method, args):
            self.calls.append((method, tuple(args)))
            return (method, tuple(args))

    return FakeImage()


class TestDefaultImageOverride(unittest.TestCase):
    def test_method_and_dimensions(self):
        from responsiveimages.types import DefaultImageOverride

        o = DefaultImageOverride.parse(["Fill", 800, 600])
        self.assertEqual(o.method, "Fill")
        self.assertEqual(o.dimensions, (800, 600))

    def test_dimensions_only(self):
        from responsiveimages.types import DefaultImageOverride

        o = DefaultImageOverride.parse([400, 300])
        self.assertIsNone(o.method)
        self.assertEqual(o.dimensions, (400, 300))

    def test_empty_and_method_only(self):
        from responsiveimages.types import DefaultImageOverride

        self.assertEqual(DefaultImageOverride.parse([]), DefaultImageOverride())
        self.assertEqual(DefaultImageOverride.parse(None), DefaultImageOverride())
        o = DefaultImageOverride.parse(["Fill"])
        self.assertEqual(o.method, "Fill")
        self.assertIsNone(o.dimensions)


class TestPrecedenceChains(unittest.TestCase):
    def test_method_chain(self):
        from responsiveimages.responsive_image import resolve_default_image_method

        cfg = {"method": "Fit", "default_image_method": "Fill"}
        self.assertEqual(resolve_default_image_method("Pad", cfg, "ScaleWidth"), "Pad")
        self.assertEqual(resolve_default_image_method(None, cfg, "ScaleWidth"), "Fill")
        self.assertEqual(resolve_default_image_method(None, {"method": "Fit"}, "ScaleWidth"), "Fit")
        self.assertEqual(resolve_default_image_method(None, {}, "ScaleWidth"), "ScaleWidth")

    def test_dimensions_chain(self):
        from responsiveimages.responsive_image import resolve_default_image_dimensions

        cfg = {"default_image_dimensions": [640, 480]}
        self.assertEqual(resolve_default_image_dimensions((400, 300), cfg, (800, 600)), (400, 300))
        self.assertEqual(resolve_default_image_dimensions(None, cfg, (800, 600)), (640, 480))
        self.assertEqual(resolve_default_image_dimensions(None, {"default_arguments": [320]}, (800, 600)), (320,))
        self.assertEqual(resolve_default_image_dimensions(None, None, (800, 600)), (800, 600))

    def test_css_classes_chain(self):
        from responsiveimages.responsive_image import resolve_css_classes

        self.assertEqual(resolve_css_classes({"css_classes": "hero wide"}, ""), "hero wide")
        self.assertEqual(resolve_css_classes({}, "default-class"), "default-class")
        self.assertEqual(resolve_css_classes({"css_classes": ""}, "default-class"), "")


class TestResponsiveImage(unittest.TestCase):
    def test_source_kind_and_iterability(self):
        from responsiveimages.responsive_image import ResponsiveImage
        from responsiveimages.sources import Source, SourceSet

        image = _fake_image()
        source = Source(image=image, method="Fill", argument_sets=((800, 800),))

        single = ResponsiveImage(image=image, format="img", default_image_dimensions=(800, 600), default_image_method="Fill", source=source)
        self.assertEqual(single.source_kind, "single")
        self.assertFalse(single.is_source_iterable())

        multiple = ResponsiveImage(
            image=image, format="picture", default_image_dimensions=(800, 600), default_image_method="Fill", source=SourceSet((source,))
        )
        self.assertEqual(multiple.source_kind, "multiple")
        self.assertTrue(multiple.is_source_iterable())

        empty = ResponsiveImage(image=image, format="picture", default_image_dimensions=(800, 600), default_image_method="Fill")
        self.assertEqual(empty.source_kind, "none")
        self.assertFalse(empty.is_source_iterable())

    def test_img_cannot_carry_multiple_sources(self):
        from responsiveimages.errors import InvalidConfigError
        from responsiveimages.responsive_image import ResponsiveImage
        from responsiveimages.sources import Source, SourceSet

        image = _fake_image()
        a = Source(image=image, method="Fill", argument_sets=((800, 800),))
        b = Source(image=image, method="Fill", argument_sets=((400, 400),))
        with self.assertRaises(InvalidConfigError):
            ResponsiveImage(image=image, format="img", default_image_dimensions=(1,), default_image_method="Fill", source=SourceSet((a, b)))

    def test_default_image_invokes_method_with_dimensions(self):
        from responsiveimages.responsive_image import ResponsiveImage

        image = _fake_image()
        ri = ResponsiveImage(image=image, format="img", default_image_dimensions=(800, 600), default_image_method="Fill")
        self.assertEqual(ri.get_default_image(), ("Fill", (800, 600)))
        self.assertEqual(image.calls, [("Fill", (800, 600))])

    def test_default_image_with_unsupported_method(self):
        from responsiveimages.errors import UnsupportedMethodError
        from responsiveimages.responsive_image import ResponsiveImage

        ri = ResponsiveImage(image=_fake_image(), format="img", default_image_dimensions=(800, 600), default_image_method="Crop")
        with self.assertRaises(UnsupportedMethodError) as ctx:
            ri.get_default_image()
        self.assertEqual(ctx.exception.method, "Crop")

    def test_css_helpers(self):
        from responsiveimages.responsive_image import ResponsiveImage

        ri = ResponsiveImage(image=_fake_image(), format="img", default_image_dimensions=(1,), default_image_method="Fill")
        self.assertEqual(ri.css_class_string(), "ResponsiveImage")

        self.assertEqual(
            ResponsiveImage(
                image=_fake_image(), format="img", default_image_dimensions=(1,), default_image_method="Fill", default_css_classes="img-fluid"
            ).css_class_string(),
            "ResponsiveImage img-fluid",
        )

        styled = ri.with_css_classes("  class-one   class-two ")
        self.assertEqual(styled.css_class_string(), "ResponsiveImage class-one class-two")
        self.assertIsNone(ri.css_classes)


class TestResponsiveImageAssembler(unittest.TestCase):
    def _resolved(self, config):
        from responsiveimages.resolver import ResolvedSet
        from responsiveimages.types import SourceDefinition

        return ResolvedSet(
            set_name="Set",
            format="picture",
            kind="single",
            definitions=(SourceDefinition(argument_sets=((800,),)),),
            config=config,
        )

    def test_override_wins_over_config_and_globals(self):
        from responsiveimages.config import GlobalDefaults
        from responsiveimages.responsive_image import ResponsiveImageAssembler

        assembler = ResponsiveImageAssembler(GlobalDefaults(default_method="ScaleWidth", default_image_dimensions=(800, 600)))
        cfg = {"default_image_method": "ScaleWidth", "default_image_dimensions": [100, 100], "template": "Custom/Template"}
        ri = assembler.assemble(_fake_image(), self._resolved(cfg), None, ["Fill", 800, 600])

        self.assertEqual(ri.default_image_method, "Fill")
        self.assertEqual(ri.default_image_dimensions, (800, 600))
        self.assertEqual(ri.template, "Custom/Template")

    def test_dimension_override_lets_method_fall_through(self):
        from responsiveimages.config import GlobalDefaults
        from responsiveimages.responsive_image import ResponsiveImageAssembler

        assembler = ResponsiveImageAssembler(GlobalDefaults(default_method="ScaleWidth", default_css_classes="img-fluid"))
        ri = assembler.assemble(_fake_image(), self._resolved({}), None, [400, 300])

        self.assertEqual(ri.default_image_method, "ScaleWidth")
        self.assertEqual(ri.default_image_dimensions, (400, 300))
        self.assertEqual(ri.css_classes, "img-fluid")
        self.assertIsNone(ri.template)

    def test_unsupported_default_method_fails_fast(self):
        from responsiveimages.config import GlobalDefaults
        from responsiveimages.errors import UnsupportedMethodError
        from responsiveimages.responsive_image import ResponsiveImageAssembler

        assembler = ResponsiveImageAssembler(GlobalDefaults())
        with self.assertRaises(UnsupportedMethodError):
            assembler.assemble(_fake_image(), self._resolved({}), None, ["Crop", 10, 10])


if __name__ == "__main__":
    unittest.main()
