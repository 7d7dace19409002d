import yaml

from shipyard.chart.application import ApplicationChart, ChartConfig
from shipyard.config.models import App, Pool
from shipyard.templates.storage import Templates


def _app():
    return App.model_validate({
        "kind": "App",
        "metadata": {"name": "web"},
        "spec": {"pool": "gold", "deployments": [{"image": "nginx:1.25", "version": 2, "units": 3}]},
    })


def _pool():
    return Pool.model_validate({
        "kind": "Pool",
        "metadata": {"name": "gold"},
        "spec": {"namespace": "gold-ns", "appQuotaLimit": 10},
    })


def test_new_builds_inputs_from_app_pool_and_templates():
    chart = ApplicationChart.new(_app(), _pool(), Templates(yamls={"a.yaml": "x"}))
    assert chart.app_name == "web"
    assert chart.namespace == "gold-ns"
    assert chart.values() == {
        "app": {
            "name": "web",
            "pool": "gold",
            "deployments": [{"image": "nginx:1.25", "version": 2, "units": 3}],
        }
    }


def test_export_writes_full_chart(tmp_path):
    chart = ApplicationChart.new(_app(), _pool(), Templates(yamls={"deployment.yaml": "kind: Deployment"}))
    chart_dir = chart.export_to_directory(tmp_path, ChartConfig(version="1.2.3"))

    assert chart_dir == tmp_path / "web"
    meta = yaml.safe_load((chart_dir / "Chart.yaml").read_text())
    assert meta["name"] == "web"
    assert meta["version"] == "1.2.3"
    assert meta["apiVersion"] == "v2"
    values = yaml.safe_load((chart_dir / "values.yaml").read_text())
    assert values["app"]["deployments"][0]["units"] == 3
    assert (chart_dir / "templates" / "deployment.yaml").read_text() == "kind: Deployment"
