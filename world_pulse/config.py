"""全局配置常量"""

# 窗口
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
FPS = 60
MAX_PIXEL_RATIO = 2.0  # 高 DPI 倍率上限

# 地形数据（world-atlas 110m TopoJSON）
LAND_TOPOLOGY_URL = "https://cdn.jsdelivr.net/npm/world-atlas@2/land-110m.json"
COUNTRIES_TOPOLOGY_URL = "https://cdn.jsdelivr.net/npm/world-atlas@2/countries-110m.json"
LAND_OBJECT = "land"
COUNTRIES_OBJECT = "countries"
FETCH_TIMEOUT = 15  # 秒

# 投影
FIT_PADDING_MIN = 12.0
FIT_PADDING_RATIO = 0.028
FIT_UPSCALE = 1.06
SOUTH_GATE_LAT = -60.0  # 低于该纬度的线条不绘制

# 交互
HOVER_THRESHOLD_PX = 20.0
LEAVE_POSITION = (-1.0, -1.0)

# 颜色
BG_STOPS = [
    (0.0, (0x0A, 0x14, 0x20)),  # #0a1420
    (0.6, (0x06, 0x0D, 0x17)),  # #060d17
    (1.0, (0x00, 0x00, 0x00)),
]
BG_CENTER = (0.55, 0.45)
BG_RADIUS_RATIO = 0.9

PURPLE = (0x7C, 0x3A, 0xED)  # #7c3aed
CYAN = (0x22, 0xD3, 0xEE)    # #22d3ee
INDIGO = (0x63, 0x66, 0xF1)  # #6366f1
VIOLET = (0xA7, 0x8B, 0xFA)  # #a78bfa
WHITE = (0xFF, 0xFF, 0xFF)
CORE_STOPS = [(0.0, PURPLE), (0.5, CYAN), (1.0, INDIGO)]

# 三层描边：(颜色, 线宽, 透明度, 模糊半径)
LAND_PASSES = [
    (PURPLE, 2.4, 0.5, 24),
    (CYAN, 1.6, 0.6, 20),
]
LAND_CORE = (1.1, 0.95)
BORDER_PASSES = [
    (PURPLE, 1.4, 0.35, 18),
    (CYAN, 1.0, 0.45, 16),
]
BORDER_CORE = (0.8, 0.95)

# 图钉
PIN_DOT_RADIUS = 3.2
PIN_RING_RADIUS = 6.2
PIN_RING_WIDTH = 1.1
PIN_RING_ALPHA = 0.7
PIN_GLOW = 12

# 脉冲（blip）动画：(时长 ms, 起始半径, 结束半径, 起始透明度)
BLIP_NEW = (760.0, 4.0, 22.0, 1.0)
BLIP_REPEAT = (420.0, 8.0, 20.0, 0.85)
BLIP_NEW_GLOW = 14
BLIP_REPEAT_GLOW = 10
BLIP_RING_WIDTH = 1.6

# 演示程序
PIN_CLICK_THRESHOLD = 10  # 点击次数达到后固定图钉
BUTTON_RADIUS = 56
TOOLTIP_SIZE = (160, 44)
