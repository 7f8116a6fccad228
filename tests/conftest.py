import matplotlib
import pytest

from tidyflow.datasets import make_ames, make_crickets, make_two_class

# テスト中は画面表示を行わないバックエンドで描画する
matplotlib.use("Agg")


@pytest.fixture(scope="session")
def ames():
    return make_ames(n=600)


@pytest.fixture(scope="session")
def crickets():
    return make_crickets()


@pytest.fixture(scope="session")
def two_class():
    return make_two_class(n=400)
