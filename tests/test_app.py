import io
import os
import zipfile


def compile_(client, source="int main(){return 0;}"):
    return client.post("/api/compile", json={"source_code": source})


def test_compile_end_to_end(client):
    resp = compile_(client)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['success'] is True
    assert len(data['stages']) == 6
    assert len(data['outputs']['tokens']) > 0
    assert data['outputs']['asm'] and all(isinstance(l, str) for l in data['outputs']['asm'])
    assert data['outputs']['ir'][-1]['op'] == 'RET'


def test_compile_without_source(client):
    resp = client.post("/api/compile", json={})
    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'error': 'No source code provided'}


def test_compile_with_non_json_body(client):
    resp = client.post("/api/compile", data="int a;", content_type="text/plain")
    assert resp.status_code == 400


def test_compile_rejects_oversized_source(app, client):
    app.config['MAX_SOURCE_BYTES'] = 10
    resp = compile_(client, "int a = 1234567890;")
    assert resp.status_code == 400
    assert 'too large' in resp.get_json()['error']


def test_step_next(client):
    session_id = compile_(client).get_json()['session_id']
    resp = client.get("/api/step", query_string={'session_id': session_id, 'step': 0, 'action': 'next'})
    data = resp.get_json()
    assert resp.status_code == 200
    assert data['current_step'] == 1
    assert data['total_steps'] == 6
    assert data['animations'][0]['type'] == 'build_ast'
    assert data['explanations']['title'] == 'Syntax Analysis'


def test_step_jump_negative(client):
    session_id = compile_(client).get_json()['session_id']
    resp = client.get("/api/step", query_string={
        'session_id': session_id, 'step': 3, 'action': 'jump', 'to': -5,
    })
    assert resp.get_json()['current_step'] == 0


def test_step_invalid(client):
    session_id = compile_(client).get_json()['session_id']
    resp = client.get("/api/step", query_string={'session_id': session_id, 'step': 99, 'action': 'prev'})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Invalid step'


def test_step_missing_session_id(client):
    resp = client.get("/api/step")
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'No session ID provided'


def test_unknown_session(client):
    for path in ("/api/step", "/api/visualize", "/api/download"):
        resp = client.get(path, query_string={'session_id': 'compile_' + 'f' * 32, 'type': 'ast'})
        assert resp.status_code == 404
        assert resp.get_json() == {'success': False, 'error': 'Compilation result not found'}


def test_traversal_id_is_not_found(client):
    resp = client.get("/api/visualize", query_string={'session_id': '../../etc'})
    assert resp.status_code == 404


def test_visualize(client):
    session_id = compile_(client).get_json()['session_id']
    data = client.get("/api/visualize", query_string={'session_id': session_id}).get_json()
    assert len(data['nodes']) == 6
    resp = client.get("/api/visualize", query_string={'session_id': session_id, 'stage': 'nope'})
    assert resp.status_code == 400


def test_download_dot(client):
    session_id = compile_(client).get_json()['session_id']
    resp = client.get("/api/download", query_string={'session_id': session_id, 'type': 'cfg', 'format': 'dot'})
    assert resp.status_code == 200
    assert resp.headers['Content-Disposition'] == 'attachment; filename="control_flow_graph.dot"'
    assert resp.mimetype == 'text/plain'
    assert resp.get_data(as_text=True).startswith('digraph CFG {')


def test_download_all_materializes_zip(app, client):
    session_id = compile_(client).get_json()['session_id']
    resp = client.get("/api/download", query_string={'session_id': session_id, 'type': 'all', 'format': 'png'})
    assert resp.status_code == 200
    assert resp.mimetype == 'application/zip'
    with zipfile.ZipFile(io.BytesIO(resp.data)) as zf:
        assert len(zf.namelist()) == 6
    archive = os.path.join(app.config['SESSION_ROOT'], session_id, 'compilation_results.zip')
    assert os.path.isfile(archive)


def test_download_missing_type(client):
    session_id = compile_(client).get_json()['session_id']
    resp = client.get("/api/download", query_string={'session_id': session_id})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Missing parameters'


def test_download_invalid_format(client):
    session_id = compile_(client).get_json()['session_id']
    resp = client.get("/api/download", query_string={'session_id': session_id, 'type': 'tokens', 'format': 'dot'})
    assert resp.status_code == 400
    assert resp.get_json()['success'] is False


def test_unknown_route_is_json(client):
    resp = client.get("/api/nothing")
    assert resp.status_code == 404
    assert resp.get_json()['success'] is False


def test_cors_header(client):
    resp = client.post("/api/compile", json={"source_code": "int a;"},
                       headers={"Origin": "http://localhost:3000"})
    assert resp.headers.get('Access-Control-Allow-Origin') == '*'
