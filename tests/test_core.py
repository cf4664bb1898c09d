"""
test_core.py - Unit tests for the core modules

Run with: pytest tests/test_core.py -v
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from heatflow.core.units import f2c, c2f, PIXELS_PER_INCH, cylinder_volume_m3
from heatflow.core.materials import Material, MaterialLibrary, MaterialCategory, get_material
from heatflow.core.geometry import (
    Sample, Container, ContainerShape, SampleSize, ring_layout
)
from heatflow.core.grid import HeatGrid, NO_OWNER
from heatflow.core.classifier import classify_domain


def uniform_sample(x, y, radius=30.0, material="Plastic (PVC)", **kwargs):
    m = get_material(material)
    return Sample(x=x, y=y, radius=radius, core_material=m,
                  middle_material=m, outer_material=m, **kwargs)


class TestUnits:
    """Tests for the unit conversions"""

    def test_temperature_round_trip(self):
        """Freezing and boiling points"""
        assert f2c(32.0) == pytest.approx(0.0)
        assert f2c(212.0) == pytest.approx(100.0)
        assert c2f(100.0) == pytest.approx(212.0)

    def test_array_conversion(self):
        """Conversions apply element-wise"""
        values = np.array([32.0, 212.0])
        np.testing.assert_allclose(f2c(values), [0.0, 100.0])

    def test_cylinder_volume(self):
        """1 ft³ expressed as a cylinder in inches"""
        # r² · h = 1728 / pi  ->  1 ft³
        radius = 1.0
        height = 1728.0 / np.pi
        assert cylinder_volume_m3(radius, height) == pytest.approx(0.0283168)


class TestMaterials:
    """Tests for the material catalog"""

    def test_diffusivity(self):
        """alpha = k / (rho·cp)"""
        al = get_material("Aluminum")
        assert al.diffusivity == pytest.approx(205.0 / (2700.0 * 900.0))

    def test_catalog_contents(self):
        """Every reference material is available"""
        lib = MaterialLibrary()
        for name in ["Aluminum", "Plastic (PVC)", "Water", "Air",
                     "Steel", "Copper", "Glass", "Phenolic Foam"]:
            assert lib.get(name).name == name

    def test_unknown_material(self):
        """Unknown names raise KeyError"""
        with pytest.raises(KeyError):
            MaterialLibrary().get("Unobtainium")
        with pytest.raises(KeyError):
            get_material("Unobtainium")

    def test_categories(self):
        """Listing by category"""
        lib = MaterialLibrary()
        assert "Water" in lib.list_materials(MaterialCategory.LIQUID)
        assert "Water" not in lib.list_materials(MaterialCategory.METAL)
        assert len(lib.list_materials()) >= 8

    def test_custom_material(self):
        """Custom materials can be registered and looked up"""
        lib = MaterialLibrary()
        cork = Material("Cork", thermal_conductivity=0.04, specific_heat=2000.0, density=120.0)
        lib.add_custom_material(cork)
        assert lib.get("Cork") is cork

    def test_immutability(self):
        """Materials are frozen; with_changes returns a copy"""
        water = get_material("Water")
        with pytest.raises(AttributeError):
            water.density = 1.0
        dense = water.with_changes(density=1200.0)
        assert dense.density == 1200.0
        assert water.density == 1000.0

    def test_dict_round_trip(self):
        """to_dict / from_dict preserve every property"""
        steel = get_material("Steel")
        assert Material.from_dict(steel.to_dict()) == steel


class TestSample:
    """Tests for the layered sample geometry"""

    def test_fraction_radii(self):
        """Default fractions 0.6 / 0.8 / 1.0"""
        s = Sample(x=0, y=0, radius=30)
        core, middle, outer = s.layer_radii()
        assert core == pytest.approx(18.0)
        assert middle == pytest.approx(24.0)
        assert outer == pytest.approx(30.0)

    def test_thickness_radii(self):
        """Explicit thicknesses in inches override the fractions"""
        s = Sample(x=0, y=0, radius=100, outer_thickness_in=0.5, middle_thickness_in=1.0)
        core, middle, outer = s.layer_radii()
        assert outer == pytest.approx(100.0)
        assert middle == pytest.approx(100.0 - 0.5 * PIXELS_PER_INCH)
        assert core == pytest.approx(100.0 - 1.5 * PIXELS_PER_INCH)

    def test_invalid_thickness(self):
        """Layers thicker than the sample are rejected"""
        with pytest.raises(ValueError):
            Sample(x=0, y=0, radius=50, outer_thickness_in=2.0, middle_thickness_in=2.0)

    def test_invalid_fractions(self):
        """Fractions must be strictly increasing"""
        with pytest.raises(ValueError):
            Sample(x=0, y=0, radius=30, core_radius_fraction=0.9, middle_radius_fraction=0.8)

    def test_material_at(self):
        """Material by radial distance"""
        s = Sample(x=0, y=0, radius=30)
        assert s.material_at(0.0).name == "Water"
        assert s.material_at(20.0).name == "Plastic (PVC)"
        assert s.material_at(30.0).name == "Aluminum"
        assert s.material_at(30.5) is None

    def test_water_mass_density(self):
        """Core density = water mass / core cylinder volume"""
        s = Sample(x=0, y=0, radius=PIXELS_PER_INCH, size=SampleSize.SMALL,
                   water_mass_lbs=0.2)
        core_in = 0.6
        volume_m3 = np.pi * core_in ** 2 * 4.0 * 0.0254 ** 3
        expected = 0.2 * 0.453592 / volume_m3

        core = s.effective_core_material()
        assert core.density == pytest.approx(expected, rel=1e-4)
        assert core.thermal_conductivity == s.core_material.thermal_conductivity

    def test_non_positive_water_mass(self):
        """Zero or negative water mass is rejected at construction"""
        with pytest.raises(ValueError):
            Sample(x=0, y=0, radius=30, size=SampleSize.SMALL, water_mass_lbs=0.0)
        with pytest.raises(ValueError):
            Sample(x=0, y=0, radius=30, size=SampleSize.SMALL, water_mass_lbs=-1.0)

    def test_temperature_starts_at_initial(self):
        """The displayed temperature starts from the initial temperature"""
        assert Sample(x=0, y=0, initial_temperature=70.0).temperature == 70.0
        assert Sample(x=0, y=0, initial_temperature=70.0, temperature=80.0).temperature == 80.0

    def test_density_needs_size_and_mass(self):
        """Without both size and mass the core material is unchanged"""
        s = Sample(x=0, y=0, radius=30, water_mass_lbs=0.2)
        assert s.effective_core_material() is s.core_material

    def test_size_from_string(self):
        """Size accepts its string value"""
        s = Sample(x=0, y=0, radius=30, size="4x8")
        assert s.size is SampleSize.LARGE
        assert s.size.height_in == 8.0

    def test_clamp_temperature(self):
        """Target falls back to the initial temperature"""
        s = Sample(x=0, y=0, initial_temperature=120.0)
        assert s.clamp_temperature == 120.0
        s.target_temperature = 95.0
        assert s.clamp_temperature == 95.0

    def test_unique_ids(self):
        """Generated ids are distinct"""
        ids = {Sample(x=0, y=0).id for _ in range(50)}
        assert len(ids) == 50


class TestContainer:
    """Tests for the container shapes"""

    def test_circle_contains(self):
        """Circle of diameter width"""
        c = Container(shape=ContainerShape.CIRCLE, width=600)
        assert c.contains(400 + 299, 400, 400, 400)
        assert not c.contains(400 + 301, 400, 400, 400)

    def test_rectangle_contains(self):
        """Rectangle centred on the given point"""
        c = Container(shape=ContainerShape.RECTANGLE, width=200, height=100)
        assert c.contains(199, 149, 100, 100)
        assert not c.contains(100, 151, 100, 100)

    def test_vectorised_contains(self):
        """Works on coordinate arrays"""
        c = Container(width=100)
        px = np.array([50.0, 99.0, 101.0])
        mask = c.contains(px, np.full(3, 50.0), 50.0, 50.0)
        assert mask.tolist() == [True, True, False]

    def test_fill_temperature(self):
        """Liquid fill uses its own temperature"""
        c = Container(ambient_temperature=70.0)
        assert c.fill_temperature == 70.0
        c = Container(ambient_temperature=70.0, fill_is_liquid=True, liquid_temperature=40.0)
        assert c.fill_temperature == 40.0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            Container(width=0)

    def test_center(self):
        """Default centre is the middle of the render surface"""
        assert Container().center(800, 600) == (400, 300)
        assert Container(x=10, y=20).center(800, 600) == (10, 20)


class TestRingLayout:
    """Tests for the auto-layout"""

    def test_positions(self):
        """Samples on a ring of radius span/3"""
        c = Container(width=600)
        samples = ring_layout(c, 4, 800, 800)

        assert len(samples) == 4
        assert samples[0].x == pytest.approx(600.0)
        assert samples[0].y == pytest.approx(400.0)
        for s in samples:
            assert np.hypot(s.x - 400, s.y - 400) == pytest.approx(200.0)

    def test_names_and_ids(self):
        """Fresh names and ids, even with a template"""
        template = uniform_sample(0, 0, initial_temperature=130.0)
        samples = ring_layout(Container(), 3, 800, 800, template=template)

        assert [s.name for s in samples] == ["Sample 1", "Sample 2", "Sample 3"]
        assert len({s.id for s in samples} | {template.id}) == 4
        assert all(s.initial_temperature == 130.0 for s in samples)

    def test_empty(self):
        assert ring_layout(Container(), 0, 800, 800) == []


class TestHeatGrid:
    """Tests for the HeatGrid"""

    def test_for_render(self):
        """Dimensions are the ceiling of the downsampled render surface"""
        grid = HeatGrid.for_render(800, 600, 4)
        assert grid.dims == (200, 150)
        assert grid.shape == (150, 200)
        assert grid.n_cells == 30000

        grid = HeatGrid.for_render(801, 600, 4)
        assert grid.cols == 201

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            HeatGrid.for_render(0, 600)

    def test_indexing(self):
        """Cell <-> world mapping"""
        grid = HeatGrid(cols=10, rows=10, downsample=4)
        assert grid.cell_to_world(2, 3) == (12, 8)
        assert grid.world_to_cell(12.4, 8.0) == (2, 3)
        assert grid.in_bounds(9, 9)
        assert not grid.in_bounds(10, 0)

    def test_register_material(self):
        """The material table has no duplicates"""
        grid = HeatGrid(cols=3, rows=3)
        a = grid.register_material(get_material("Water"))
        b = grid.register_material(get_material("Water"))
        c = grid.register_material(get_material("Air"))
        assert a == b
        assert c != a
        assert len(grid.materials) == 2

    def test_unknown_sample(self):
        """Unknown samples own no cells"""
        grid = HeatGrid(cols=3, rows=3)
        rows, cols = grid.cells_of("missing")
        assert rows.size == 0 and cols.size == 0
        assert grid.owner_of(1, 1) is None

    def test_memory_estimate(self):
        grid = HeatGrid(cols=100, rows=100)
        info = grid.get_info()
        assert info['total_cells'] == 10000
        assert info['memory_MB'] > 0


class TestClassifier:
    """Tests for the cell classification"""

    def setup_method(self):
        self.container = Container(width=120, ambient_temperature=70.0)
        self.sample = Sample(x=100, y=100, radius=30, initial_temperature=110.0)
        self.grid = classify_domain(self.container, [self.sample], 200, 200)

    def test_outside_is_fixed_air(self):
        """Cells outside the container are fixed ambient air"""
        g = self.grid
        assert g.boundary[0, 0]
        assert g.material_at(0, 0).name == "Air"
        assert g.T[0, 0] == pytest.approx(f2c(70.0))
        assert g.owner[0, 0] == NO_OWNER

    def test_fill(self):
        """Solid fill diffuses from the ambient temperature"""
        g = self.grid
        # World (144, 100): inside the container, outside the sample
        assert not g.boundary[25, 36]
        assert g.material_at(25, 36).name == "Phenolic Foam"
        assert g.T[25, 36] == pytest.approx(f2c(70.0))
        assert g.owner_of(25, 36) is None

    def test_sample_layers(self):
        """Layer material by radial distance"""
        g = self.grid
        assert g.material_at(25, 25).name == "Water"           # r = 0
        assert g.material_at(25, 30).name == "Plastic (PVC)"   # r = 20
        assert g.material_at(25, 32).name == "Aluminum"        # r = 28
        assert g.T[25, 25] == pytest.approx(f2c(110.0))
        assert not g.boundary[25, 25]

    def test_ownership_cache(self):
        """The cache lists exactly the cells owned by the sample"""
        g = self.grid
        rows, cols = g.cells_of(self.sample.id)
        assert rows.size > 0
        assert rows.size == np.count_nonzero(g.owner == 0)
        assert all(g.owner_of(r, c) == self.sample.id for r, c in zip(rows, cols))

    def test_liquid_fill(self):
        """Liquid fill is a fixed boundary at the liquid temperature"""
        c = Container(width=120, fill_material=get_material("Water"),
                      fill_is_liquid=True, liquid_temperature=40.0)
        g = classify_domain(c, [self.sample], 200, 200)
        assert g.boundary[25, 36]
        assert g.T[25, 36] == pytest.approx(f2c(40.0))
        assert not g.boundary[25, 25]

    def test_first_match_wins(self):
        """Overlapping samples: the earlier one keeps the shared cells"""
        a = uniform_sample(92, 100, name="A")
        b = uniform_sample(108, 100, name="B")
        g = classify_domain(self.container, [a, b], 200, 200)

        assert g.owner_of(25, 25) == a.id
        assert g.cell_count(b.id) < g.cell_count(a.id)
        assert np.count_nonzero(g.owner == 0) == g.cell_count(a.id)

    def test_sample_outside_container(self):
        """A sample outside the container owns no cells"""
        outside = uniform_sample(10, 10, radius=5)
        g = classify_domain(self.container, [outside], 200, 200)
        assert g.cell_count(outside.id) == 0

    def test_peltier_clamp(self):
        """Active samples have every owned cell clamped"""
        s = uniform_sample(100, 100, peltier_active=True, target_temperature=90.0)
        g = classify_domain(self.container, [s], 200, 200)
        rows, cols = g.cells_of(s.id)

        assert np.count_nonzero(g.clamped) == rows.size
        np.testing.assert_allclose(g.clamp_T[rows, cols], f2c(90.0))

    def test_alpha(self):
        """Per-cell diffusivity follows the material"""
        g = self.grid
        assert g.alpha[25, 25] == pytest.approx(get_material("Water").diffusivity)
        assert g.alpha[25, 36] == pytest.approx(get_material("Phenolic Foam").diffusivity)


# =============================================================================
# RUN
# =============================================================================
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
