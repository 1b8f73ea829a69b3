import warnings

# Ignore warnings from livevip.shared
warnings.filterwarnings("ignore", category=DeprecationWarning, module="livevip.shared.*")

# Import viewing fixtures so they are available to all tests
from tests.fixtures.viewing_fixtures import *  # noqa: E402, F403
