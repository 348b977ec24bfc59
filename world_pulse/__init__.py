"""One Click One World：霓虹世界地图与点击脉冲"""
