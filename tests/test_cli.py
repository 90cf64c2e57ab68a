import json

from PIL import Image

from atlaspack.cli import main


def write_sprite(folder, name, size, color=(255, 0, 0, 255)):
    Image.new('RGBA', size, color).save(folder / name)


def test_pack_directory(tmp_path, capsys):
    src = tmp_path / 'sprites'
    src.mkdir()
    write_sprite(src, 'a.png', (100, 100))
    write_sprite(src, 'b.png', (100, 100))
    (src / 'notes.txt').write_text('ignored')
    out = tmp_path / 'out'

    assert main([str(src), str(out), '--size', '128', '--padding', '0']) == 0

    assert sorted(p.name for p in out.iterdir()) == [
        'atlas_1.json', 'atlas_1.png', 'atlas_2.json', 'atlas_2.png', 'pack_manifest.json']
    doc = json.loads((out / 'atlas_1.json').read_text())
    assert doc['frames']['a.png']['frame'] == {'x': 0, 'y': 0, 'w': 100, 'h': 100}
    assert doc['meta']['image'] == 'atlas_1.png'
    manifest = json.loads((out / 'pack_manifest.json').read_text())
    assert [a['spriteCount'] for a in manifest['atlases']] == [1, 1]
    with Image.open(out / 'atlas_2.png') as sheet:
        assert sheet.size == (128, 128)
    assert 'Final packing efficiency' in capsys.readouterr().out


def test_oversize_sprite_fails(tmp_path, capsys):
    src = tmp_path / 'sprites'
    src.mkdir()
    write_sprite(src, 'big.png', (200, 20))

    assert main([str(src), str(tmp_path / 'out'), '--size', '128']) == 1
    assert 'big.png' in capsys.readouterr().err
    assert not (tmp_path / 'out').exists()


def test_extend_replace_and_remove(tmp_path):
    first = tmp_path / 'first'
    first.mkdir()
    write_sprite(first, 'hero.png', (60, 60))
    write_sprite(first, 'coin.png', (16, 16))
    write_sprite(first, 'old.png', (30, 30))
    out = tmp_path / 'out'
    assert main([str(first), str(out), '--size', '128', '--padding', '2']) == 0

    second = tmp_path / 'second'
    second.mkdir()
    write_sprite(second, 'coin.png', (20, 20), (0, 0, 255, 255))
    write_sprite(second, 'gem.png', (10, 10))
    edited = tmp_path / 'edited'
    assert main([str(second), str(edited),
                 '--extend', str(out / 'atlas_1.json'),
                 '--extend-image', str(out / 'atlas_1.png'),
                 '--remove', 'old.png']) == 0

    doc = json.loads((edited / 'atlas_1.json').read_text())
    assert set(doc['frames']) == {'hero.png', 'coin.png', 'gem.png'}
    assert doc['frames']['coin.png']['frame']['w'] == 20
    assert doc['meta']['size'] == {'w': 128, 'h': 128}
    assert doc['meta']['padding'] == 2
    with Image.open(edited / 'atlas_1.png') as sheet:
        hero = doc['frames']['hero.png']['frame']
        assert sheet.convert('RGBA').getpixel((hero['x'] + 5, hero['y'] + 5)) == (255, 0, 0, 255)


def test_remove_requires_extend(tmp_path):
    assert main([str(tmp_path), str(tmp_path / 'out'), '--remove', 'x.png']) == 2


def test_extend_requires_the_atlas_sheet(tmp_path, capsys):
    src = tmp_path / 'sprites'
    src.mkdir()
    write_sprite(src, 'hero.png', (60, 60))
    out = tmp_path / 'out'
    assert main([str(src), str(out), '--size', '128']) == 0

    edited = tmp_path / 'edited'
    assert main([str(src), str(edited), '--extend', str(out / 'atlas_1.json')]) == 2
    assert '--extend-image' in capsys.readouterr().err
    assert not edited.exists()
