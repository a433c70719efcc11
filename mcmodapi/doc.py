from markupsafe import escape


DOC_TEMPLATE = '''<!DOCTYPE html>
<html lang="zh-CN">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>MCmod API 文档</title>
<style>
body {{ font-family: -apple-system, "Segoe UI", Roboto, sans-serif; max-width: 1000px; margin: 0 auto; padding: 20px; color: #333; }}
h1 {{ border-bottom: 2px solid #3498db; padding-bottom: 10px; }}
.endpoint {{ background: #fff; border-radius: 6px; box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1); padding: 20px; margin-bottom: 20px; }}
.method {{ background: #61affe; color: #fff; border-radius: 4px; padding: 4px 8px; font-weight: bold; }}
code {{ background: #f5f5f5; padding: 2px 4px; }}
table {{ width: 100%; border-collapse: collapse; }}
th, td {{ border: 1px solid #e9ecef; padding: 8px 12px; text-align: left; }}
</style>
</head>
<body>
<h1>MCmod API 文档</h1>
<p>非官方的 MC 百科 API，用于获取 MC 百科的数据。所有接口返回 JSON，出错时返回 <code>{{"error", "message"}}</code>。</p>
{endpoints}
</body>
</html>'''


ENDPOINT_TEMPLATE = '''<div class="endpoint">
<p><span class="method">GET</span> <code>{path}</code></p>
<p>{description}</p>
<p>示例: <a href="{base_url}{example}"><code>{example}</code></a></p>
<table>
<thead><tr><th>参数名</th><th>类型</th><th>是否必须</th><th>描述</th></tr></thead>
<tbody>
{params}
</tbody>
</table>
</div>'''


PARAM_TEMPLATE = '<tr><td>{name}</td><td>{type}</td><td>{required}</td><td>{description}</td></tr>'


ID_PARAM = ('id', 'string', True, '数字 ID')
OTHERS_PARAM = ('others', 'boolean', False, '为 true 时包含统计、评分、更新日志与团队信息')
COMMUNITY_PARAM = ('community', 'boolean', False, '为 true 时包含教程与讨论')
RELATIONS_PARAM = ('relations', 'boolean', False, '为 true 时包含关联模组')


ENDPOINTS = (
    ('/api/search', '根据关键词搜索 MC 百科内容，包括模组、资料、整合包等', '/api/search?q=minecraft', (
        ('q', 'string', True, '搜索关键词'),
        ('offset', 'number', False, '结果偏移量，默认为 0（每页 30 个结果）'),
        ('page', 'number', False, '页码，从 1 开始（提供 offset 时忽略此参数）'),
        ('mold', 'number', False, '1 表示启用复杂搜索，默认为 0'),
        ('filter', 'number', False, '结果类型过滤器，1-7（模组、整合包、资料、教程、作者、用户、社群），默认为 0'),
    )),
    ('/api/class', '获取模组详情', '/api/class?id=1', (
        ID_PARAM, OTHERS_PARAM, COMMUNITY_PARAM, RELATIONS_PARAM,
    )),
    ('/api/modpack', '获取整合包详情', '/api/modpack?id=1', (
        ID_PARAM, OTHERS_PARAM, COMMUNITY_PARAM, RELATIONS_PARAM,
    )),
    ('/api/item', '获取物品/方块资料详情', '/api/item?id=1', (
        ID_PARAM, OTHERS_PARAM,
    )),
    ('/api/post', '获取教程详情', '/api/post?id=1', (
        ID_PARAM,
    )),
    ('/api/server', '获取服务器详情', '/api/server?id=1', (
        ID_PARAM,
    )),
    ('/api/list', '获取模组列表', '/api/list?page=1', (
        ('category', 'string', False, '分类'),
        ('page', 'number', False, '页码，从 1 开始'),
    )),
)


def render_doc(base_url=''):
    endpoints = []
    for path, description, example, params in ENDPOINTS:
        rows = '\n'.join(
            PARAM_TEMPLATE.format(
                name=escape(name),
                type=escape(kind),
                required='是' if required else '否',
                description=escape(text),
            )
            for name, kind, required, text in params
        )
        endpoints.append(ENDPOINT_TEMPLATE.format(
            path=escape(path),
            description=escape(description),
            base_url=escape(base_url),
            example=escape(example),
            params=rows,
        ))
    return DOC_TEMPLATE.format(endpoints='\n'.join(endpoints))
