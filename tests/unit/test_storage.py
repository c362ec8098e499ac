"""
Unit Tests for Local Storage
"""
import os
import stat
import sys

import pytest

from placement_tracker.exceptions import StorageCorruptError
from placement_tracker.storage import DRAFT_KEY, SESSION_KEY, LocalStore


class TestLocalStore:
    """Test JSON file entries"""

    def test_missing_entry_reads_none(self, store: LocalStore):
        """Test reading an absent key"""
        assert store.read(DRAFT_KEY) is None
        assert not store.exists(DRAFT_KEY)

    def test_write_then_read(self, store: LocalStore):
        """Test an entry is replaced wholesale"""
        store.write(DRAFT_KEY, {'Date': '2024-06-01', 'Extra': [1, 2]})
        store.write(DRAFT_KEY, {'Date': '2024-06-02'})

        assert store.read(DRAFT_KEY) == {'Date': '2024-06-02'}
        assert not store.path_for(DRAFT_KEY).with_name('placementFormData.json.tmp').exists()

    def test_remove(self, store: LocalStore):
        """Test removal, including of an absent entry"""
        store.write(SESSION_KEY, {'username': 'x'})
        store.remove(SESSION_KEY)
        store.remove(SESSION_KEY)

        assert store.read(SESSION_KEY) is None

    def test_corrupt_entry_raises(self, store: LocalStore):
        """Test malformed JSON surfaces as StorageCorruptError"""
        store.path_for(SESSION_KEY).write_text('{"username": ', encoding='utf-8')

        with pytest.raises(StorageCorruptError) as exc_info:
            store.read(SESSION_KEY)

        assert exc_info.value.key == SESSION_KEY
        assert exc_info.value.code == 'STORAGE_CORRUPT'

    def test_unknown_key(self, store: LocalStore):
        """Test only configured keys are addressable"""
        with pytest.raises(KeyError):
            store.read('somethingElse')

    @pytest.mark.skipif(sys.platform == 'win32', reason='POSIX permissions')
    def test_private_entry_is_owner_only(self, store: LocalStore):
        """Test private writes restrict permissions"""
        store.write(SESSION_KEY, {'username': 'x', 'token': 'secret'}, private=True)

        mode = stat.S_IMODE(os.stat(store.path_for(SESSION_KEY)).st_mode)
        assert mode == 0o600

    def test_paths_follow_config(self, config):
        """Test files live under the config directory"""
        store = LocalStore.from_config(config)

        assert str(store.path_for(DRAFT_KEY)).startswith(config.config_dir)
        assert store.path_for(DRAFT_KEY).name == 'placementFormData.json'
        assert store.path_for(SESSION_KEY).name == 'user.json'
